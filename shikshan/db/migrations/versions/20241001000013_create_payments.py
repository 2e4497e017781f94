"""Create payments table (subscription payments by schools)."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import create_index_if_missing, timestamps
from shikshan.db.types import GUID, JSONType, UTCDateTime

INDEXES = [
    ("ix_payments_school_id", ["school_id"]),
    ("ix_payments_subscription_id", ["subscription_id"]),
    ("ix_payments_status", ["status"]),
    ("ix_payments_billing_period", ["billing_period_start", "billing_period_end"]),
    ("ix_payments_created_at", ["created_at"]),
]
PAYMENT_METHODS = ("credit_card", "debit_card", "upi", "net_banking", "wallet", "bank_transfer")
PAYMENT_STATUSES = ("pending", "processing", "completed", "failed", "cancelled", "refunded")


def upgrade():
    op.create_table(
        "payments",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "subscription_id", GUID(), sa.ForeignKey("subscriptions.id", ondelete="RESTRICT"), nullable=False
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_method", sa.String(20), nullable=True),
        sa.Column("transaction_id", sa.String(255), nullable=True, unique=True),
        sa.Column("gateway_transaction_id", sa.String(255), nullable=True),
        sa.Column("gateway_response", JSONType(), nullable=True),
        sa.Column("billing_period_start", UTCDateTime(), nullable=False),
        sa.Column("billing_period_end", UTCDateTime(), nullable=False),
        sa.Column("due_date", UTCDateTime(), nullable=True),
        sa.Column("paid_at", UTCDateTime(), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("invoice_number", sa.String(100), nullable=True, unique=True),
        sa.Column("tax_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("metadata", JSONType(), nullable=True),
        *timestamps(),
        sa.CheckConstraint(check_in("status", PAYMENT_STATUSES), name="ck_payments_status"),
        sa.CheckConstraint(
            "payment_method IS NULL OR " + check_in("payment_method", PAYMENT_METHODS),
            name="ck_payments_payment_method",
        ),
        sa.CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
    )
    for name, columns in INDEXES:
        create_index_if_missing(name, "payments", columns)


def downgrade():
    op.drop_table("payments")
