"""
Dashboard Package

Page logic of the admin dashboard, kept apart from any rendering:

- listing: search filtering, pagination, table view state
- forms: validation schemas of the create/edit pages
- pages: list/form page controllers talking to the gateway
- geocoding: debounced LocationIQ autocomplete for the vendor form
"""

from .forms import FormResult, validate_form
from .geocoding import LocationAutocomplete, Suggestion
from .listing import PAGE_SIZE_OPTIONS, ListView, PageSlice, filter_items, paginate
from .pages import DashboardClient, Feedback, FormPage, ListPage

__all__ = [
    "DashboardClient",
    "Feedback",
    "FormPage",
    "FormResult",
    "ListPage",
    "ListView",
    "LocationAutocomplete",
    "PAGE_SIZE_OPTIONS",
    "PageSlice",
    "Suggestion",
    "filter_items",
    "paginate",
    "validate_form",
]
