"""Root GraphQL schema."""
import strawberry

from apps.core.schema import AuthMutation, CoreQuery
from apps.accounts.schema import AccountQuery, AccountMutation
from apps.clients.schema import ClientQuery, ClientMutation
from apps.catalog.schema import CatalogQuery, CatalogMutation
from apps.invoices.schema import InvoiceQuery, InvoiceMutation
from apps.recurring.schema import RecurringInvoiceQuery, RecurringInvoiceMutation
from apps.currency.schema import CurrencyQuery


@strawberry.type
class Query(
    CoreQuery,
    AccountQuery,
    ClientQuery,
    CatalogQuery,
    InvoiceQuery,
    RecurringInvoiceQuery,
    CurrencyQuery,
):
    @strawberry.field
    def health(self) -> str:
        return "ok"


@strawberry.type
class Mutation(
    AuthMutation,
    AccountMutation,
    ClientMutation,
    CatalogMutation,
    InvoiceMutation,
    RecurringInvoiceMutation,
):
    pass


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
)
