from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """
    Page-number pagination that lets clients choose the page size.

    Ledger listings can span a whole payroll month per employee, so the
    client may raise page_size up to max_page_size.
    """

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100
