# estate_app/routes/auth.py

from http import HTTPStatus

from flask import current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy.exc import SQLAlchemyError

from estate_app.models import AdminProfile, db
from estate_app.services.activity_log_service import ActionType, ActivityLogError, ActivityLogService, EntityType


def register_auth_routes(app):
    """Register admin session routes"""

    @app.post("/login")
    def login():
        payload = request.get_json(silent=True) or request.form
        email = (payload.get("email") or "").strip().lower()
        password = payload.get("password") or ""

        admin = AdminProfile.find_by_email(email)
        if admin is None or not admin.is_active or not admin.check_password(password):
            current_app.logger.warning("Failed admin login for %s", email or "<blank>")
            return jsonify({"error": "Invalid email or password."}), HTTPStatus.UNAUTHORIZED

        login_user(admin)
        try:
            ActivityLogService().log(
                admin_id=admin.id,
                action_type=ActionType.ADMIN_LOGIN,
                entity_type=EntityType.ADMIN,
                entity_id=admin.id,
                metadata={"ip_address": request.remote_addr},
            )
        except (ActivityLogError, SQLAlchemyError) as exc:
            db.session.rollback()
            current_app.logger.warning("Failed to log admin login for %s: %s", admin.id, exc)

        current_app.logger.info("Admin %s logged in", admin.id)
        return jsonify({"id": admin.id, "email": admin.email, "role": admin.role.value})

    @app.post("/logout")
    @login_required
    def logout():
        admin_id = current_user.id
        logout_user()
        current_app.logger.info("Admin %s logged out", admin_id)
        return jsonify({"status": "logged_out"})
