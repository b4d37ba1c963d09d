"""
Printable receipts.

Renders a billed registry entry as a self-contained HTML page that the
browser can print directly.  All customer and product text is escaped.
"""

import html

from registry_pos_api.app.schemas.registry import RegistryEntryRead

RECEIPT_STYLES = """
    <style>
      body { font-family: sans-serif; padding: 20px; }
      h1 { text-align: center; }
      table { width: 100%; border-collapse: collapse; margin-top: 1em; }
      th, td { border: 1px solid #333; padding: 8px; text-align: left; }
      th { background: #f0f0f0; }
      tfoot td { font-weight: bold; }
    </style>
"""


def format_money(value: float) -> str:
    return f"${value:.2f}"


class ReceiptService:
    """Turns a registry entry into receipt HTML."""

    @staticmethod
    def render(entry: RegistryEntryRead) -> str:
        rows = "".join(
            "<tr>"
            f"<td>{html.escape(item.product_name)}</td>"
            f"<td>{item.quantity}</td>"
            f"<td>{format_money(item.unit_price)}</td>"
            f"<td>{format_money(item.sub_total)}</td>"
            "</tr>"
            for item in entry.bill_items
        )
        return (
            "<html>"
            "<head>"
            f"<title>Receipt #{entry.id}</title>"
            f"{RECEIPT_STYLES}"
            "</head>"
            "<body>"
            f"<h1>Receipt #{entry.id}</h1>"
            f"<p><strong>Date:</strong> {html.escape(entry.date)}</p>"
            f"<p><strong>Client:</strong> {html.escape(entry.name)}</p>"
            "<table>"
            "<thead><tr><th>Product</th><th>Qty</th><th>Unit Price</th><th>Subtotal</th></tr></thead>"
            f"<tbody>{rows}</tbody>"
            "<tfoot><tr>"
            '<td colspan="3" style="text-align: right;">Total:</td>'
            f"<td>{format_money(entry.total_price)}</td>"
            "</tr></tfoot>"
            "</table>"
            "</body>"
            "</html>"
        )
