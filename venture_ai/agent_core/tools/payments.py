from __future__ import annotations

"""Payments tools (``backends.payments``).

Every call except listing and connecting accounts targets a connected
account by ``account_id``.
"""

from typing import List, Literal, Optional

from pydantic import Field

from ..schemas.domain import ToolName
from .backends import DelegatingTool
from .base import NoArgs, ToolArgs
from .gated import DestructiveTool


class ConnectAccountArgs(ToolArgs):
    secret_key: str = Field(min_length=1, description="Secret API key of the payments account")
    project_id: Optional[str] = Field(default=None, description="Project the account belongs to")


class AccountRef(ToolArgs):
    account_id: str = Field(min_length=1, description="Connected account ID")


class ListArgs(AccountRef):
    limit: int = Field(default=10, ge=1, le=100)


class CreateCustomerArgs(AccountRef):
    email: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None


class CreateProductArgs(AccountRef):
    name: str = Field(min_length=1, description="Product name")
    description: Optional[str] = None


class Recurring(ToolArgs):
    interval: Literal["day", "week", "month", "year"]


class CreatePriceArgs(AccountRef):
    product_id: str = Field(min_length=1)
    unit_amount: int = Field(ge=0, description="Amount in the smallest currency unit (e.g. cents)")
    currency: str = Field(default="usd", min_length=3, max_length=3)
    recurring: Optional[Recurring] = None


class PaymentLinkArgs(AccountRef):
    price_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)


class RevenueArgs(AccountRef):
    days: int = Field(default=30, ge=1, le=365, description="Period to sum revenue over")


def payment_tools() -> List[DelegatingTool]:
    group = "payments"
    return [
        DelegatingTool(
            ToolName.connect_payment_account,
            "Connect a payments account to a project using its secret key",
            ConnectAccountArgs,
            group,
            local_fields=frozenset(),
        ),
        DelegatingTool(ToolName.list_payment_accounts, "List connected payments accounts", NoArgs, group),
        DestructiveTool(
            ToolName.disconnect_payment_account,
            "Disconnect a payments account. REQUIRES HUMAN APPROVAL every time.",
            AccountRef,
            group,
            prompt=lambda a: f"I'm about to disconnect payments account **{a.account_id}**. Do you approve?",
            done=lambda a: f"Disconnected payments account {a.account_id}",
        ),
        DelegatingTool(ToolName.get_balance, "Get the balance of a connected account", AccountRef, group),
        DelegatingTool(ToolName.list_customers, "List customers", ListArgs, group),
        DelegatingTool(ToolName.create_customer, "Create a customer", CreateCustomerArgs, group),
        DelegatingTool(ToolName.list_payments, "List recent payments", ListArgs, group),
        DelegatingTool(ToolName.list_subscriptions, "List subscriptions", ListArgs, group),
        DelegatingTool(ToolName.list_products, "List products", ListArgs, group),
        DelegatingTool(ToolName.create_product, "Create a product", CreateProductArgs, group),
        DelegatingTool(ToolName.create_price, "Create a price for a product", CreatePriceArgs, group),
        DelegatingTool(ToolName.create_payment_link, "Create a shareable payment link for a price", PaymentLinkArgs, group),
        DelegatingTool(ToolName.get_revenue, "Sum revenue over a recent period", RevenueArgs, group),
        DelegatingTool(ToolName.list_invoices, "List invoices", ListArgs, group),
    ]
