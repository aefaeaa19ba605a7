from services.cash import cash_store
from services.cheques import cheque_store
from services.digital import digital_store

CATEGORY_STORES = {
    'cash': (cash_store,),
    'digital': (digital_store,),
    'cheques': (cheque_store,),
}
ALL_STORES = (cash_store, digital_store, cheque_store)


def search_transactions(user_id, query, category=''):
    """
    Match ``query`` against the party of one table or all three.

    ``category`` is ``'cash'``, ``'digital'`` or ``'cheques'``; anything else
    (including ``''``) searches every table. Results are concatenated in
    cash, digital, cheque order.
    """
    query = (query or '').strip()
    if not query:
        return []
    stores = CATEGORY_STORES.get(category or '', ALL_STORES)
    results = []
    for store in stores:
        results.extend(store.search_party(user_id, query))
    return results
