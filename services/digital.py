from models import DigitalTransaction
from services.transactions import TransactionStore

digital_store = TransactionStore(DigitalTransaction, local_search_fields=('party', 'bank_name', 'reference_number'))
