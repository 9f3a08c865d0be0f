# create_admin.py

import os
import sys
from getpass import getpass

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError

from app import app
from estate_app.models import AdminProfile, AdminRole, db


def create_admin():
    with app.app_context():
        email = input("Enter email: ").strip().lower()
        full_name = input("Enter full name: ").strip()
        role_input = (input("Role [chairman/admin] (default chairman): ").strip().lower() or "chairman")

        if role_input not in {role.value for role in AdminRole}:
            print("Error: Role must be 'chairman' or 'admin'.")
            sys.exit(1)

        if AdminProfile.find_by_email(email):
            print("Error: Email already exists.")
            sys.exit(1)

        password = getpass("Enter password: ")
        password2 = getpass("Confirm password: ")

        if password != password2:
            print("Error: Passwords do not match.")
            sys.exit(1)

        if not password:
            print("Error: Password cannot be empty.")
            sys.exit(1)

        admin = AdminProfile(email=email, full_name=full_name or None, role=AdminRole(role_input), is_active=True)
        admin.set_password(password)
        try:
            db.session.add(admin)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            print(f"Error creating admin account: {e}")
            sys.exit(1)

        print("Admin account created successfully!")
        print(f"   Email: {admin.email}")
        print(f"   Role: {admin.role.value}")
        print(f"   Active: {admin.is_active}")
        if admin.is_chairman:
            print("\nNote: the chairman has every console permission.")


if __name__ == "__main__":
    create_admin()
