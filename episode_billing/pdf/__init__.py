"""Invoice PDF rendering."""
from episode_billing.pdf.invoice_pdf import build_line_items, render_invoice_pdf, safe_filename

__all__ = ["build_line_items", "render_invoice_pdf", "safe_filename"]
