"""
Inventory Reports Service

Stock valuation and stock-status buckets. A product is out of stock at 0,
low on stock when ``0 < stock <= low_stock_alert`` and in stock otherwise.
"""

from typing import Dict, List

from pos_api.common.money import ZERO, to_money
from pos_api.core.config import settings
from pos_api.modules.products.models import Product
from .base import BaseReportService

STOCK_STATUSES = ("in-stock", "low-stock", "out-of-stock")


def _product_row(product: Product) -> Dict:
    return {
        "product_id": product.id,
        "name": product.name,
        "sku": product.sku,
        "stock": product.stock,
        "low_stock_alert": product.low_stock_alert,
        "cost": to_money(product.cost),
        "price": to_money(product.price),
        "stock_value": to_money(product.cost) * product.stock,
        "stock_status": product.stock_status,
    }


class InventoryReportService(BaseReportService):
    """Service for generating inventory reports"""

    def generate(self, window=None) -> Dict:
        products = self.db.query(Product).order_by(Product.name).all()
        rows = [_product_row(product) for product in products]

        summary = {
            "total_products": len(rows),
            "total_value": sum((row["stock_value"] for row in rows), ZERO),
            "total_stock": sum(row["stock"] for row in rows),
            "out_of_stock": sum(1 for row in rows if row["stock_status"] == "out-of-stock"),
            "low_stock": sum(1 for row in rows if row["stock_status"] == "low-stock"),
        }

        by_status: List[Dict] = []
        for stock_status in STOCK_STATUSES:
            grouped = [row for row in rows if row["stock_status"] == stock_status]
            if grouped:
                by_status.append({
                    "status": stock_status,
                    "count": len(grouped),
                    "total_value": sum((row["stock_value"] for row in grouped), ZERO),
                    "products": grouped,
                })

        tracked = [
            row for row, product in zip(rows, products) if product.track_inventory
        ]
        top_by_value = sorted(tracked, key=lambda row: row["stock_value"], reverse=True)
        low_stock = sorted(
            (row for row in tracked if row["stock_status"] == "low-stock"),
            key=lambda row: row["stock"]
        )

        return {
            "summary": summary,
            "products_by_stock_status": by_status,
            "top_products_by_value": top_by_value[:settings.TOP_PRODUCTS_LIMIT],
            "low_stock_products": low_stock,
        }
