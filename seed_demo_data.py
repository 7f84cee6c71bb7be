"""
Seed a handful of demo subscriptions into the configured database.
Run:  python seed_demo_data.py
"""
from datetime import date, timedelta

from subtracker.infrastructure.db.session import get_session_factory, init_db
from subtracker.infrastructure.db.store import SubscriptionStore
from subtracker.application.subscriptions import (
    AddCategoryUseCase, ArchiveSubscriptionUseCase, CreateSubscriptionUseCase,
)

init_db()
store = SubscriptionStore(get_session_factory())
if store.load():
    print("Store already has subscriptions, nothing to do")
    raise SystemExit(0)

today = date.today()
create = CreateSubscriptionUseCase(store)

create.execute(name="Netflix", price="649", billing_cycle="Monthly",
               start_date=today - timedelta(days=25), category="Entertainment",
               color="#EF4444", reminder_days=3, sound_tone="Bell")
create.execute(name="Spotify", price="119", billing_cycle="Monthly",
               start_date=today - timedelta(days=10), category="Entertainment",
               color="#1DB954", reminder_days=1)
create.execute(name="Cult.fit", price="2999", billing_cycle="Quarterly",
               start_date=today - timedelta(days=40), category="Fitness",
               color="#10B981", reminder_days=5)
create.execute(name="Coursera Plus", price="24999", billing_cycle="Yearly",
               start_date=today - timedelta(days=200), category="Education",
               color="#6366F1", reminder_days=7)
create.execute(name="Swiggy One", price="99", billing_cycle="Weekly",
               start_date=today - timedelta(days=2), category="Food",
               color="#F59E0B", reminder_days=1)
AddCategoryUseCase(store).execute("Food")

old = create.execute(name="Hotstar", price="299", billing_cycle="Monthly",
                     start_date=today - timedelta(days=90), category="Entertainment")
ArchiveSubscriptionUseCase(store).execute(old.id)

print(f"Seeded {len(store.load())} subscriptions")
