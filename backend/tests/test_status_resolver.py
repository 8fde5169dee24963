"""Tests for payment-driven invoice status transitions."""

from decimal import Decimal

import pytest

from billing.errors import NotFoundError, ValidationError
from billing.models.enums import InvoiceStatus, PaymentMethod
from billing.models.payment import Payment
from billing.schemas.payment import PaymentCreate
from billing.services.invoice_service import update_invoice_status
from billing.services.status_resolver import apply_payment, record_payment, resolve_status
from billing.utils.timeutils import utcnow


def _pay(repo, invoice_id, amount):
    return record_payment(repo, PaymentCreate(
        invoice_id=invoice_id,
        amount=Decimal(amount),
        payment_date=utcnow(),
        payment_method=PaymentMethod.BANK_TRANSFER,
    ))


# ---------------------------------------------------------------------------
# resolve_status (pure)
# ---------------------------------------------------------------------------

class TestResolveStatus:
    def test_no_payments_is_unpaid(self):
        assert resolve_status(Decimal("1100"), []) == InvoiceStatus.UNPAID

    def test_some_payment_is_partial(self):
        assert resolve_status(Decimal("1100"), [Decimal("500")]) == InvoiceStatus.PARTIAL

    def test_exact_payment_is_paid(self):
        assert resolve_status(Decimal("1100"), [Decimal("600"), Decimal("500")]) == InvoiceStatus.PAID

    def test_overpayment_is_paid(self):
        assert resolve_status(Decimal("1100"), [Decimal("1500")]) == InvoiceStatus.PAID

    def test_paid_is_never_regressed(self):
        assert resolve_status(Decimal("1100"), [Decimal("10")], current_status="Paid") == InvoiceStatus.PAID

    def test_apply_payment_adds_new_amount_to_prior(self):
        class _Invoice:
            total_amount = Decimal("1100.00")
            status = "Partial"

        prior = [Payment(amount=Decimal("600.00"))]
        assert apply_payment(_Invoice(), prior, Decimal("500.00")) == InvoiceStatus.PAID
        assert apply_payment(_Invoice(), prior, Decimal("100.00")) == InvoiceStatus.PARTIAL


# ---------------------------------------------------------------------------
# record_payment
# ---------------------------------------------------------------------------

class TestRecordPayment:
    def test_two_payments_settle_invoice(self, repo, make_invoice):
        invoice = make_invoice()
        assert invoice.total_amount == Decimal("1100")

        _pay(repo, invoice.id, "600")
        assert repo.find_invoice(invoice.id).status == InvoiceStatus.PARTIAL.value

        _pay(repo, invoice.id, "500")
        assert repo.find_invoice(invoice.id).status == InvoiceStatus.PAID.value
        assert len(repo.list_payments_for_invoice(invoice.id)) == 2

    def test_single_partial_payment(self, repo, make_invoice):
        invoice = make_invoice()
        _pay(repo, invoice.id, "500")
        assert repo.find_invoice(invoice.id).status == InvoiceStatus.PARTIAL.value

    def test_single_full_payment(self, repo, make_invoice):
        invoice = make_invoice()
        payment = _pay(repo, invoice.id, "1100")
        assert payment.amount == Decimal("1100")
        assert repo.find_invoice(invoice.id).status == InvoiceStatus.PAID.value

    def test_overpayment_marks_paid(self, repo, make_invoice):
        invoice = make_invoice()
        _pay(repo, invoice.id, "1250")
        assert repo.find_invoice(invoice.id).status == InvoiceStatus.PAID.value

    def test_payment_after_paid_keeps_paid(self, repo, make_invoice):
        invoice = make_invoice()
        _pay(repo, invoice.id, "1100")
        _pay(repo, invoice.id, "5")
        assert repo.find_invoice(invoice.id).status == InvoiceStatus.PAID.value
        assert len(repo.list_payments_for_invoice(invoice.id)) == 2

    def test_overdue_invoice_moves_to_partial(self, repo, make_invoice):
        invoice = make_invoice()
        update_invoice_status(repo, invoice.id, InvoiceStatus.OVERDUE)
        _pay(repo, invoice.id, "100")
        assert repo.find_invoice(invoice.id).status == InvoiceStatus.PARTIAL.value

    def test_unchanged_status_is_not_rewritten(self, repo, make_invoice):
        invoice = make_invoice()
        _pay(repo, invoice.id, "100")
        updated_at = repo.find_invoice(invoice.id).updated_at

        _pay(repo, invoice.id, "100")
        refreshed = repo.find_invoice(invoice.id)
        assert refreshed.status == InvoiceStatus.PARTIAL.value
        assert refreshed.updated_at == updated_at

    def test_missing_invoice(self, repo, db):
        with pytest.raises(NotFoundError):
            _pay(repo, 999, "100")
        assert db.query(Payment).count() == 0

    def test_rejects_non_positive_amount(self, repo, make_invoice):
        invoice = make_invoice()
        payment_in = PaymentCreate.model_construct(
            invoice_id=invoice.id,
            amount=Decimal("0"),
            payment_date=utcnow(),
            payment_method=PaymentMethod.CASH,
            notes=None,
        )
        with pytest.raises(ValidationError):
            record_payment(repo, payment_in)
        assert repo.list_payments_for_invoice(invoice.id) == []

    def test_failed_status_update_discards_payment(self, repo, make_invoice, monkeypatch):
        invoice = make_invoice()

        def _fail(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(repo, "update_invoice_fields", _fail)
        with pytest.raises(RuntimeError):
            _pay(repo, invoice.id, "500")

        monkeypatch.undo()
        assert repo.list_payments_for_invoice(invoice.id) == []
        assert repo.find_invoice(invoice.id).status == InvoiceStatus.UNPAID.value
