from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """
    Page-number pagination where clients may choose the page size.
    """
    page_size = 10

    # e.g. /api/gigs/?page_size=5
    page_size_query_param = 'page_size'

    # Upper bound for client-chosen page sizes.
    max_page_size = 100
