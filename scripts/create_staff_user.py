# scripts/create_staff_user.py
"""
Create a staff account for the admin/kitchen dashboards.

    python scripts/create_staff_user.py --email chef@dineeasy.lk --name "Head Chef" --role kitchen
"""

import argparse
import getpass
import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
load_dotenv()

from app.database import SessionLocal, Base, engine
from app import models  # noqa: F401
from app.schemas.auth import StaffCreate, STAFF_ROLES
from app.services.staff_service import StaffService

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a DineEasy staff account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True, help="Full name")
    parser.add_argument("--role", default="admin", choices=STAFF_ROLES)
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        staff = StaffService(db).create_staff(
            StaffCreate(email=args.email, password=password, full_name=args.name, role=args.role)
        )
    except Exception as e:
        print(f"Could not create staff account: {getattr(e, 'detail', e)}")
        return 1
    finally:
        db.close()

    print(f"Created {staff.role} account {staff.email} ({staff.id})")
    return 0

if __name__ == "__main__":
    sys.exit(main())
