from flask import Blueprint

from routes.transactions import register_transaction_views
from services.cheques import cheque_store

cheques_bp = Blueprint('cheques', __name__, url_prefix='/cheques')

register_transaction_views(cheques_bp, cheque_store, "Cheque")
