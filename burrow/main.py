import logging
import threading
from collections import OrderedDict

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .error_handlers import init_error_handlers
from .filters_catalog import ANY_NEIGHBORHOOD, CATEGORIES, NEIGHBORHOODS, RENT_RANGES, ROOM_TYPES, SORT_OPTIONS
from .listings import price_stats
from .logging_config import setup_logging
from .mapping import filters_to_query, to_api_filters
from .middleware import ANONYMOUS_SESSION, RequestIdMiddleware
from .schemas import FilterUpdate, ListingView, NavigationState, Property
from .settings import settings
from .store import AppStore

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("burrow")

app = FastAPI(title="Burrow Listing Service", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)
init_error_handlers(app)

# one client-side store per browsing session, like one browser tab;
# least recently used sessions are dropped past MAX_SESSIONS
_stores: "OrderedDict[str, AppStore]" = OrderedDict()
_stores_lock = threading.Lock()


def get_store(x_session_id: str = Header(default=ANONYMOUS_SESSION)) -> AppStore:
    with _stores_lock:
        store = _stores.get(x_session_id)
        if store is not None:
            _stores.move_to_end(x_session_id)
            return store
        logger.info("New listing session %s", x_session_id)
        store = _stores[x_session_id] = AppStore()
        while len(_stores) > settings.MAX_SESSIONS:
            evicted, _ = _stores.popitem(last=False)
            logger.info("Evicted idle listing session %s", evicted)
        return store


def drop_store(session_id: str) -> bool:
    with _stores_lock:
        return _stores.pop(session_id, None) is not None


def listing_view(store: AppStore) -> ListingView:
    state = store.filters.state
    properties = store.listings.sorted(state.sort_by)
    return ListingView(
        filters=state,
        api_filters=to_api_filters(state),
        properties=properties,
        pagination=store.listings.pagination,
        status=store.listings.status,
        error=store.listings.error,
        query=filters_to_query(state),
        price_stats=price_stats(properties),
    )


def _after_fetch(store: AppStore) -> ListingView:
    if store.listings.status == "succeeded":
        store.listings.adjust_slider_ceiling(store.filters)
    return listing_view(store)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/listings/options")
def filter_options():
    """Choices for the filter dropdowns."""
    return {
        "categories": list(CATEGORIES),
        "roomTypes": list(ROOM_TYPES),
        "neighborhoods": [ANY_NEIGHBORHOOD, *NEIGHBORHOODS],
        "rentRanges": list(RENT_RANGES),
        "sortOptions": list(SORT_OPTIONS),
    }


@app.get("/listings", response_model=ListingView)
def get_listings(request: Request, page: int = Query(1, ge=1), store: AppStore = Depends(get_store)):
    query = {k: v for k, v in request.query_params.items() if k != "page"}
    with store.lock:
        result = store.sync.reconcile(query, page=page)
        if not result.fetched and page != store.listings.current_page:
            store.sync.go_to_page(page)
        return _after_fetch(store)


@app.post("/listings/navigate", response_model=ListingView)
def navigate(nav: NavigationState, store: AppStore = Depends(get_store)):
    with store.lock:
        store.sync.reconcile({}, navigation_state=nav.model_dump())
        return _after_fetch(store)


@app.put("/listings/filters", response_model=ListingView)
def update_filters(update: FilterUpdate, store: AppStore = Depends(get_store)):
    with store.lock:
        store.sync.apply_update(update)
        return _after_fetch(store)


@app.post("/listings/retry", response_model=ListingView)
def retry(store: AppStore = Depends(get_store)):
    with store.lock:
        store.listings.retry()
        return _after_fetch(store)


@app.post("/listings/reset", response_model=ListingView)
def reset(store: AppStore = Depends(get_store)):
    with store.lock:
        store.sync.reset()
        return _after_fetch(store)


@app.get("/properties/{property_id}", response_model=Property)
def property_details(property_id: str, store: AppStore = Depends(get_store)):
    with store.lock:
        if not store.user_listings.fetch_property_by_id(property_id):
            raise store.user_listings.last_error
        return store.user_listings.current_property


@app.delete("/session", status_code=204)
def end_session(x_session_id: str = Header(default=ANONYMOUS_SESSION), store: AppStore = Depends(get_store)):
    with store.lock:
        store.logout()
    drop_store(x_session_id)
    logger.info("Ended listing session %s", x_session_id)
