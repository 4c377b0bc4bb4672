"""Plain-text templates for order notifications.

Each template renders a subject and body from event context data. The
registry key is the notification kind: ``order_created`` or
``order_<new status>``.
"""


class OrderPlacedTemplate:
    kind = "order_created"

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        total = context.get("total_amount", 0.0)
        currency = context.get("currency") or "RUB"
        return {
            "subject": f"Order {order_number} received",
            "body": (
                f"Thank you for your order {order_number}.\n\n"
                f"Items: {context.get('item_count', 0)}\n"
                f"Total: {total:.2f} {currency}\n\n"
                "We will let you know as soon as the seller starts processing it."
            ),
        }


class OrderProcessingTemplate:
    kind = "order_processing"

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order {order_number} is being prepared",
            "body": f"The seller has started processing your order {order_number}.",
        }


class OrderShippedTemplate:
    kind = "order_shipped"

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order {order_number} has shipped",
            "body": f"Your order {order_number} is on its way.",
        }


class OrderDeliveredTemplate:
    kind = "order_delivered"

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order {order_number} delivered",
            "body": (
                f"Your order {order_number} has been delivered.\n\n"
                "We hope you enjoy your purchase. Reviews help other buyers."
            ),
        }


class OrderCancelledTemplate:
    kind = "order_cancelled"

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        cancelled_by = context.get("changed_by") or "system"
        return {
            "subject": f"Order {order_number} cancelled",
            "body": (
                f"Your order {order_number} has been cancelled.\n"
                f"Cancelled by: {cancelled_by}\n\n"
                "If payment was captured, a refund will follow."
            ),
        }


TEMPLATE_REGISTRY: dict[str, type] = {
    template.kind: template
    for template in (
        OrderPlacedTemplate,
        OrderProcessingTemplate,
        OrderShippedTemplate,
        OrderDeliveredTemplate,
        OrderCancelledTemplate,
    )
}


def render(kind: str, context: dict) -> dict | None:
    """Render the template for ``kind``; ``None`` when no template exists."""
    template = TEMPLATE_REGISTRY.get(kind)
    if template is None:
        return None
    return template.render(context)
