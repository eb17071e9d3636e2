from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

from django.conf import settings


def build_table_payload(table_number):
    """
    Payload encoded into a table's QR code.

    Defaults to the bare table number. When CUSTOMER_QR_URL is configured the
    payload becomes that URL with ``?table=<number>`` set.
    """
    base = getattr(settings, 'CUSTOMER_QR_URL', '')
    if not base:
        return str(table_number)

    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        # Not a usable URL, fall back to the plain number
        return str(table_number)

    query = dict(parse_qsl(parts.query))
    query['table'] = str(table_number)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
