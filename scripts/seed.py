"""
Seed Script

Populates the database with demo data for development and testing.
Creates the "Aide à Domicile Lyon" company with workers, contracts,
a surcharge plan, services and one month of planning.

Usage:
    python -m scripts.seed
"""

import asyncio
from datetime import datetime, timedelta
from uuid import uuid4

from backend.db.session import get_async_session
from backend.models.company import Company
from backend.models.contract import Contract
from backend.models.event import Event
from backend.models.service import Service
from backend.models.surcharge import Surcharge
from backend.models.worker import Worker

ADDRESSES = [
    "12 rue de la République, 69002 Lyon",
    "4 place Bellecour, 69002 Lyon",
    "37 cours Gambetta, 69007 Lyon",
    "8 rue Garibaldi, 69006 Lyon",
]


async def seed():
    """Create demo data."""
    async with get_async_session() as db:
        # ── Company ───────────────────────────────────────
        company = Company(
            id=uuid4(),
            name="Aide à Domicile Lyon",
            transport_subs=[{"department": "69", "price": 72.3}],
            amount_per_km=0.35,
            fee_amount=20,
        )
        db.add(company)
        await db.flush()

        # ── Surcharge plan ────────────────────────────────
        surcharge = Surcharge(
            id=uuid4(),
            company_id=company.id,
            name="Convention collective",
            saturday=10,
            sunday=25,
            public_holiday=25,
            first_of_may=100,
            twenty_fifth_of_december=100,
            evening=15,
            evening_start_time="20:00",
            evening_end_time="23:00",
        )
        db.add(surcharge)

        # ── Services ──────────────────────────────────────
        start_of_year = datetime(datetime.now().year, 1, 1)
        hourly_service = Service(
            id=uuid4(),
            company_id=company.id,
            name="Aide à la toilette",
            nature="hourly",
            versions=[
                {
                    "start_date": start_of_year.isoformat(),
                    "surcharge_id": str(surcharge.id),
                    "exempt_from_charges": False,
                }
            ],
        )
        fixed_service = Service(
            id=uuid4(),
            company_id=company.id,
            name="Forfait courses",
            nature="fixed",
            versions=[{"start_date": start_of_year.isoformat(), "exempt_from_charges": True}],
        )
        db.add_all([hourly_service, fixed_service])
        await db.flush()

        # ── Workers & contracts ───────────────────────────
        workers_data = [
            ("Camille", "Martin", "public_transport", "69003", 35),
            ("Nadia", "Benali", "private_transport", "69100", 24),
            ("Lucas", "Petit", "company_transport", "69007", 28),
        ]
        workers = []
        for firstname, lastname, transport_type, zip_code, weekly_hours in workers_data:
            worker = Worker(
                id=uuid4(),
                company_id=company.id,
                firstname=firstname,
                lastname=lastname,
                sector="Lyon Centre",
                transport_type=transport_type,
                transport_invoice_link="https://example.com/invoices/pass.pdf",
                zip_code=zip_code,
                has_mutual_fund=lastname == "Petit",
            )
            db.add(worker)
            await db.flush()

            db.add(
                Contract(
                    id=uuid4(),
                    company_id=company.id,
                    worker_id=worker.id,
                    status="company_contract",
                    start_date=start_of_year,
                    versions=[{"start_date": start_of_year.isoformat(), "weekly_hours": weekly_hours}],
                )
            )
            workers.append(worker)

        # ── Planning of the current month ─────────────────
        month_start = datetime.now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        event_count = 0
        for day_offset in range(28):
            day = month_start + timedelta(days=day_offset)
            if day.weekday() == 6:
                continue
            for index, worker in enumerate(workers):
                for slot, hour in enumerate((8, 10, 14)):
                    db.add(
                        Event(
                            id=uuid4(),
                            company_id=company.id,
                            worker_id=worker.id,
                            type="intervention",
                            start_date=day.replace(hour=hour),
                            end_date=day.replace(hour=hour + 1, minute=30),
                            address=ADDRESSES[(index + slot) % len(ADDRESSES)],
                            service_id=hourly_service.id,
                        )
                    )
                    event_count += 1

        # One daily absence and one internal hour
        db.add(
            Event(
                id=uuid4(),
                company_id=company.id,
                worker_id=workers[0].id,
                type="absence",
                absence_nature="daily",
                start_date=month_start + timedelta(days=14),
                end_date=month_start + timedelta(days=16, hours=23, minutes=59),
            )
        )
        db.add(
            Event(
                id=uuid4(),
                company_id=company.id,
                worker_id=workers[1].id,
                type="internal_hour",
                start_date=month_start + timedelta(days=2, hours=17),
                end_date=month_start + timedelta(days=2, hours=18),
                address=ADDRESSES[0],
            )
        )

        print(f"Seeded company: {company.name} (ID: {company.id})")
        print(f"Workers: {len(workers)}")
        print(f"Events: {event_count + 2}")


if __name__ == "__main__":
    asyncio.run(seed())
