"""
Seed script to generate synthetic customers, invoices and payments for demo purposes
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from decimal import Decimal
from datetime import timedelta
from faker import Faker

from billing.database import SessionLocal, engine, Base
from billing.models.enums import PaymentMethod
from billing.repositories.sql_repository import SqlBillingRepository
from billing.schemas.customer import CustomerCreate
from billing.schemas.invoice import InvoiceCreate, InvoiceItemCreate
from billing.schemas.payment import PaymentCreate
from billing.services.customer_service import create_customer
from billing.services.invoice_service import create_invoice
from billing.services.overdue_sweep import run_overdue_sweep
from billing.services.status_resolver import record_payment
from billing.utils.timeutils import utcnow

fake = Faker()


def create_customers(repo: SqlBillingRepository, count: int = 6) -> list:
    """Create synthetic customers"""
    customers = []
    for _ in range(count):
        customers.append(create_customer(repo, CustomerCreate(
            name=fake.company(),
            email=fake.company_email(),
            phone=fake.phone_number(),
            address=fake.street_address(),
            city=fake.city(),
            postal_code=fake.postcode(),
        )))
    return customers


def _random_items() -> list:
    items = []
    for _ in range(fake.random_int(min=1, max=4)):
        items.append(InvoiceItemCreate(
            description=fake.catch_phrase(),
            quantity=Decimal(str(fake.random_int(min=1, max=20))),
            unit_price=Decimal(str(round(fake.random.uniform(10.0, 500.0), 2))),
        ))
    return items


def create_invoices(repo: SqlBillingRepository, customers: list, count: int = 12) -> list:
    """Create invoices with due dates spread around today; some already past due"""
    invoices = []
    now = utcnow()
    for _ in range(count):
        customer = fake.random_element(elements=customers)
        invoices.append(create_invoice(repo, InvoiceCreate(
            customer_id=customer.id,
            due_date=now + timedelta(days=fake.random_int(min=-30, max=30)),
            discount_rate=Decimal(fake.random_element(elements=("0", "0", "5", "10"))),
            payment_method=fake.random_element(elements=list(PaymentMethod)),
            notes=fake.sentence() if fake.boolean() else None,
            seller_name="Acme Billing Ltd",
            seller_email="billing@acme.example",
            items=_random_items(),
        )))
    return invoices


def create_payments(repo: SqlBillingRepository, invoices: list) -> int:
    """Pay a third of the invoices in full and a third partially"""
    count = 0
    for index, invoice in enumerate(invoices):
        if index % 3 == 0:
            amount = invoice.total_amount
        elif index % 3 == 1:
            amount = (invoice.total_amount / 2).quantize(Decimal("0.01"))
        else:
            continue
        record_payment(repo, PaymentCreate(
            invoice_id=invoice.id,
            amount=amount,
            payment_date=utcnow(),
            payment_method=invoice.payment_method,
        ))
        count += 1
    return count


def main():
    """Main seeding function"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    repo = SqlBillingRepository(db)
    try:
        print("Creating customers...")
        customers = create_customers(repo)
        print(f"Created {len(customers)} customers")

        print("Creating invoices...")
        invoices = create_invoices(repo, customers)
        print(f"Created {len(invoices)} invoices")

        print("Recording payments...")
        payment_count = create_payments(repo, invoices)
        print(f"Recorded {payment_count} payments")

        overdue = run_overdue_sweep(repo)

        print("\nSeeding complete!")
        print("Summary:")
        print(f"  - Customers: {len(customers)}")
        print(f"  - Invoices: {len(invoices)}")
        print(f"  - Payments: {payment_count}")
        print(f"  - Marked overdue: {len(overdue)}")

    except Exception as e:
        print(f"Error during seeding: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
