"""
Dev bootstrap script — seed a realm, an admin user and API keys.

Usage:
    python -m scripts.bootstrap_dev

This will:
  1. Create a realm named "Dev Realm" and a user who belongs to it
  2. Create one admin and one device API key
  3. Record a month of synthetic code issuance for the admin key
  4. Print the raw keys ONCE (they are never stored)

Sign-in is handled by the identity layer; put the printed user id into
the session (user_id) to use the console locally.
"""

import asyncio
import datetime
import random

from verifyadmin.auth.hashing import display_prefix, generate_api_key
from verifyadmin.core.database import async_session_factory, engine
from verifyadmin.models.authorized_app import APIUserType, AuthorizedApp
from verifyadmin.models.realm import Realm
from verifyadmin.models.user import User, user_realms
from verifyadmin.services.stats import record_codes_issued


async def main() -> None:
    today = datetime.datetime.now(datetime.timezone.utc).date()
    raw_keys: list[tuple[str, str]] = []

    async with async_session_factory() as session:
        # ── Realm + user ────────────────────────────────────
        realm = Realm(name="Dev Realm")
        user = User(email="admin@example.com", name="Dev Admin")
        session.add_all([realm, user])
        await session.flush()  # get ids

        await session.execute(
            user_realms.insert().values(user_id=user.id, realm_id=realm.id)
        )

        # ── API keys ────────────────────────────────────────
        apps = []
        for name, key_type in (("Dev Issuer", APIUserType.ADMIN), ("Dev Device", APIUserType.DEVICE)):
            raw_key, key_hash = generate_api_key()
            app = AuthorizedApp(
                realm_id=realm.id,
                name=name,
                api_key_type=key_type,
                key_prefix=display_prefix(raw_key),
                key_hash=key_hash,
            )
            session.add(app)
            apps.append(app)
            raw_keys.append((name, raw_key))
        await session.flush()

        # ── Synthetic stats ─────────────────────────────────
        issuer = apps[0]
        for days_ago in range(30):
            await record_codes_issued(
                session,
                issuer,
                count=random.randint(0, 40),
                day=today - datetime.timedelta(days=days_ago),
            )

        await session.commit()

    # ── Print results ───────────────────────────────────────
    print()
    print("=" * 60)
    print("  Dev Bootstrap Complete")
    print("=" * 60)
    print()
    print(f"  Realm:   {realm.name} (id={realm.id})")
    print(f"  User:    {user.email} (id={user.id})")
    print()
    for name, raw_key in raw_keys:
        print(f"  {name}: {raw_key}")
    print()
    print("  ⚠  Copy these keys now — they will NEVER be shown again.")
    print("=" * 60)
    print()

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
