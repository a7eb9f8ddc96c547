"""Test helpers: billing plan data and canned vendor responses."""

from unittest.mock import Mock


def shipping_options_xml(*options, code=0, text="success"):
    body = "".join(
        f"<Option><Description>{description}</Description><Price>{price}</Price></Option>"
        for description, price in options
    )
    return (
        "<HTML><BODY><Response>"
        f"<ErrorCode>{code}</ErrorCode><ErrorText>{text}</ErrorText>{body}"
        "</Response></BODY></HTML>"
    )


def order_xml(order_id="", code=0, text="success"):
    return (
        "<HTML><BODY><Response>"
        f"<ErrorCode>{code}</ErrorCode><ErrorText>{text}</ErrorText>"
        f"<OrderId>{order_id}</OrderId>"
        "</Response></BODY></HTML>"
    )


def http_response(text="", status_code=200):
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


def plan_data(products='', always_ship=False, always_fresh=False):
    data = {}
    if products:
        data['fulfillment-products'] = products
    if always_ship:
        data['fulfillment-always-ship'] = '1'
    if always_fresh:
        data['fulfillment-always-fresh'] = '1'
    return data
