from flask import Blueprint

from routes.transactions import register_transaction_views
from services.cash import cash_store

cash_bp = Blueprint('cash', __name__, url_prefix='/cash')

register_transaction_views(cash_bp, cash_store, "Cash transaction")
