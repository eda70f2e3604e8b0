"""Contacts blueprint: owner-scoped CRUD behind the bearer gate."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, g, jsonify, request
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.contact import Contact
from services.accounts import is_valid_email
from utils.auth_gate import auth_required
from utils.request_validation import parse_json_request

contacts_bp = Blueprint("contacts", __name__)

CONTACT_FIELDS = ("name", "email", "phone")


def _get_owned_contact_or_404(contact_id: int) -> Contact:
    # Another user's contact is indistinguishable from a missing one.
    contact = Contact.query.filter_by(id=contact_id, owner_id=g.current_user.id).first()
    if contact is None:
        raise NotFound("Not found")
    return contact


def _clean_fields(payload: dict) -> dict[str, str]:
    values: dict[str, str] = {}
    for field in CONTACT_FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if not isinstance(value, str) or not value.strip():
            raise BadRequest(f"{field} must be a non-empty string.")
        values[field] = value.strip()
    if "email" in values and not is_valid_email(values["email"]):
        raise BadRequest("email must be a valid email address.")
    return values


@contacts_bp.route("", methods=["GET"])
@auth_required
def list_contacts():
    contacts = (
        Contact.query.filter_by(owner_id=g.current_user.id)
        .order_by(Contact.id.asc())
        .all()
    )
    return jsonify({"contacts": [contact.to_dict() for contact in contacts]})


@contacts_bp.route("/<int:contact_id>", methods=["GET"])
@auth_required
def get_contact(contact_id: int):
    return jsonify({"contact": _get_owned_contact_or_404(contact_id).to_dict()})


@contacts_bp.route("", methods=["POST"])
@auth_required
def add_contact():
    """Create a contact owned by the caller."""

    payload = parse_json_request(request, required_keys=CONTACT_FIELDS)
    values = _clean_fields(payload)

    contact = Contact(owner_id=g.current_user.id, **values)
    db.session.add(contact)
    db.session.commit()

    return jsonify({"contact": contact.to_dict()}), HTTPStatus.CREATED


@contacts_bp.route("/<int:contact_id>", methods=["PUT"])
@auth_required
def update_contact(contact_id: int):
    """Update any of name, email or phone on a caller-owned contact."""

    contact = _get_owned_contact_or_404(contact_id)
    payload = parse_json_request(request)
    values = _clean_fields(payload)
    if not values:
        raise BadRequest("At least one of name, email or phone is required.")

    for field, value in values.items():
        setattr(contact, field, value)
    db.session.commit()

    return jsonify({"contact": contact.to_dict()})


@contacts_bp.route("/<int:contact_id>", methods=["DELETE"])
@auth_required
def remove_contact(contact_id: int):
    contact = _get_owned_contact_or_404(contact_id)
    db.session.delete(contact)
    db.session.commit()
    return jsonify({"message": "Contact deleted"})
