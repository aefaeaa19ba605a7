from models import Cheque
from services.transactions import TransactionStore

cheque_store = TransactionStore(Cheque, local_search_fields=('cheque_number', 'party', 'bank_name'))
