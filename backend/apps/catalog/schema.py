"""GraphQL schema for the product and service catalog."""
import strawberry
import strawberry_django
from strawberry import auto
from strawberry.types import Info

from apps.core.context import Context
from apps.core.permissions import check_user, get_current_user
from apps.core.schema import DeleteResult

from .models import CatalogItem


@strawberry_django.type(CatalogItem)
class CatalogItemType:
    id: auto
    name: auto
    description: auto
    rate: auto
    unit: auto
    category: auto
    is_active: auto


@strawberry.input
class CatalogItemInput:
    """Input for creating (no id) or updating a catalog item."""

    name: str
    id: strawberry.ID | None = None
    description: str = ""
    rate: float = 0.0
    unit: str = "un"
    category: str = ""


@strawberry.type
class CatalogItemResult:
    """Result of catalog operations."""

    item: CatalogItemType | None = None
    success: bool = False
    error: str | None = None


@strawberry.type
class CatalogQuery:
    @strawberry.field
    def catalog_items(
        self, info: Info[Context, None], category: str | None = None
    ) -> list[CatalogItemType]:
        """List active catalog items ordered by name."""
        user = get_current_user(info)
        queryset = CatalogItem.objects.filter(user=user, is_active=True)
        if category:
            queryset = queryset.filter(category=category)
        return list(queryset.order_by("name"))


@strawberry.type
class CatalogMutation:
    @strawberry.mutation
    def save_catalog_item(
        self, info: Info[Context, None], input: CatalogItemInput
    ) -> CatalogItemResult:
        """Create or update a catalog item."""
        user, err = check_user(info)
        if err:
            return CatalogItemResult(error=err)

        name = input.name.strip()
        if not name:
            return CatalogItemResult(error="Item name is required")
        if input.rate < 0:
            return CatalogItemResult(error="Rate must not be negative")

        if input.id is not None:
            item = CatalogItem.objects.filter(user=user, id=input.id).first()
            if not item:
                return CatalogItemResult(error="Catalog item not found")
        else:
            item = CatalogItem(user=user)

        item.name = name
        item.description = input.description
        item.rate = input.rate
        item.unit = input.unit or "un"
        item.category = input.category
        item.save()
        return CatalogItemResult(item=item, success=True)

    @strawberry.mutation
    def delete_catalog_item(self, info: Info[Context, None], id: strawberry.ID) -> DeleteResult:
        """Hide a catalog item from the catalog. Existing invoices are unaffected."""
        user, err = check_user(info)
        if err:
            return DeleteResult(error=err)

        updated = CatalogItem.objects.filter(user=user, id=id, is_active=True).update(is_active=False)
        if not updated:
            return DeleteResult(error="Catalog item not found")
        return DeleteResult(success=True)
