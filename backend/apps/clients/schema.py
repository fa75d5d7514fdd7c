"""GraphQL schema for clients."""
import strawberry
import strawberry_django
from django.db.models import Q
from strawberry import auto
from strawberry.types import Info

from apps.core.context import Context
from apps.core.permissions import check_user, get_current_user
from apps.core.schema import DeleteResult

from .models import Client


@strawberry_django.type(Client)
class ClientType:
    id: auto
    name: auto
    email: auto
    phone: auto
    address: auto
    notes: auto
    created_at: auto


@strawberry.input
class ClientInput:
    """Input for creating or updating a client."""

    name: str
    email: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""


@strawberry.type
class ClientResult:
    """Result of client operations."""

    client: ClientType | None = None
    success: bool = False
    error: str | None = None


def _apply_input(client: Client, input: ClientInput) -> str | None:
    name = input.name.strip()
    if not name:
        return "Client name is required"
    client.name = name
    client.email = input.email.strip()
    client.phone = input.phone.strip()
    client.address = input.address
    client.notes = input.notes
    return None


@strawberry.type
class ClientQuery:
    @strawberry.field
    def clients(self, info: Info[Context, None], search: str | None = None) -> list[ClientType]:
        """List the current user's clients ordered by name."""
        user = get_current_user(info)
        queryset = Client.objects.filter(user=user)
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(email__icontains=search))
        return list(queryset.order_by("name"))


@strawberry.type
class ClientMutation:
    @strawberry.mutation
    def create_client(self, info: Info[Context, None], input: ClientInput) -> ClientResult:
        """Create a new client."""
        user, err = check_user(info)
        if err:
            return ClientResult(error=err)

        client = Client(user=user)
        err = _apply_input(client, input)
        if err:
            return ClientResult(error=err)
        client.save()
        return ClientResult(client=client, success=True)

    @strawberry.mutation
    def update_client(
        self, info: Info[Context, None], id: strawberry.ID, input: ClientInput
    ) -> ClientResult:
        """Update an existing client. Invoices keep the details they were issued with."""
        user, err = check_user(info)
        if err:
            return ClientResult(error=err)

        client = Client.objects.filter(user=user, id=id).first()
        if not client:
            return ClientResult(error="Client not found")

        err = _apply_input(client, input)
        if err:
            return ClientResult(error=err)
        client.save()
        return ClientResult(client=client, success=True)

    @strawberry.mutation
    def delete_client(self, info: Info[Context, None], id: strawberry.ID) -> DeleteResult:
        """Delete a client. Invoices and templates referencing it are kept."""
        user, err = check_user(info)
        if err:
            return DeleteResult(error=err)

        deleted, _ = Client.objects.filter(user=user, id=id).delete()
        if not deleted:
            return DeleteResult(error="Client not found")
        return DeleteResult(success=True)
