from flask import Blueprint

from routes.transactions import register_transaction_views
from services.digital import digital_store

digital_bp = Blueprint('digital', __name__, url_prefix='/digital')

register_transaction_views(digital_bp, digital_store, "Digital transaction")
