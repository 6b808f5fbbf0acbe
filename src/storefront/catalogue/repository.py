from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.product import Product, ProductStatus
from storefront.domain import storefront
from storefront.shared.paging import fetch_all


@storefront.repository(part_of=Product)
class ProductRepository:
    def find_by_sku(self, sku):
        results = self._dao.query.filter(sku=sku.strip().upper()).all().items
        return results[0] if results else None

    def find_many(self, product_ids) -> dict:
        """Load products by id, skipping ids that no longer exist."""
        products = {}
        for product_id in {str(pid) for pid in product_ids}:
            try:
                products[product_id] = self.get(product_id)
            except ObjectNotFoundError:
                continue
        return products

    def active(self):
        return fetch_all(self._dao.query.filter(status=ProductStatus.ACTIVE.value))
