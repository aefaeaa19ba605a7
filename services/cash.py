from models import CashTransaction
from services.transactions import TransactionStore

cash_store = TransactionStore(CashTransaction, local_search_fields=('party', 'description'))
