"""Spreadsheet import/export."""
from episode_billing.excel.sheets import export_invoices_xlsx, import_invoices_xlsx

__all__ = ["export_invoices_xlsx", "import_invoices_xlsx"]
