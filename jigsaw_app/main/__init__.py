from flask import Blueprint

main_bp = Blueprint('main', __name__)

from jigsaw_app.main import routes
