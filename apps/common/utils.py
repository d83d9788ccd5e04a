"""
Money helpers and the {code, msg, data} response envelope used by every view.
"""
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

TWO_PLACES = Decimal('0.01')


def to_money(value) -> Decimal:
    """Coerce to a Decimal quantized to paise (half-up)"""
    if value is None or value == '':
        return Decimal('0.00')
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round_half_up(value) -> int:
    """Round to the nearest whole rupee, .5 rounding up"""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def success_response(data=None, message="Success", status_code=status.HTTP_200_OK):
    return Response({"code": 200, "msg": message, "data": data}, status=status_code)


def error_response(message="Error", errors=None, status_code=status.HTTP_400_BAD_REQUEST):
    body = {"code": status_code, "msg": message}
    if errors:
        body["errors"] = errors
    return Response(body, status=status_code)


class EnvelopePagination(PageNumberPagination):
    """?page=N&pageSize=M, capped at 100 rows"""
    page_size_query_param = 'pageSize'
    max_page_size = 100

    def __init__(self):
        self.page_size = settings.REST_FRAMEWORK.get('PAGE_SIZE', 20)


def paginated_response(queryset, serializer_class, request, message="Success"):
    """
    Serialize one page of queryset as {list, page}, where page carries
    pageNum, pageSize, total and totalPages.
    """
    paginator = EnvelopePagination()
    rows = paginator.paginate_queryset(queryset, request)
    context = {'request': request}
    serializer = serializer_class(rows, many=True, context=context)

    page = paginator.page
    return success_response({
        "list": serializer.data,
        "page": {
            "pageNum": page.number,
            "pageSize": paginator.get_page_size(request),
            "total": page.paginator.count,
            "totalPages": page.paginator.num_pages,
        },
    }, message)
