from flask import current_app, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required

from . import bp
from ..extensions import db
from ..model import User
from ..utils.api import api_ok, api_error


def _issue_token(user: User) -> str:
    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role, "name": user.name},
    )


@bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    name = (data.get("name") or "").strip()

    if not email:
        return jsonify(api_error("Email required")), 400
    if not password or len(password) < 6:
        return jsonify(api_error("Password required, min 6 chars")), 400
    if not name:
        return jsonify(api_error("Name required")), 400
    if User.query.filter_by(email=email).first():
        return jsonify(api_error("Email already registered")), 409

    # public sign-up always creates shoppers; admins come from `flask create-admin`
    user = User(email=email, name=name, role="user")
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("user %s registered", user.id)

    return jsonify(api_ok("Account created successfully", {"user": user.as_dict()})), 201


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not email or not password:
        return jsonify(api_error("Email and password are required")), 400

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        current_app.logger.warning("failed login for %s", email)
        return jsonify(api_error("Invalid email or password")), 401

    return jsonify(api_ok(
        "You've logged in successfully",
        {"user": user.as_dict(), "token": _issue_token(user)},
    )), 200


@bp.get("/me")
@jwt_required()
def me():
    user = db.session.get(User, int(get_jwt_identity()))
    if not user:
        return jsonify(api_error("user not found")), 404
    return jsonify(api_ok("OK", {"user": user.as_dict()})), 200
