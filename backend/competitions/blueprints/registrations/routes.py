"""Registrations blueprint: the registration lifecycle over HTTP.

The `competition_register` and `edit_registration` endpoints are also the
targets of the links embedded in registration emails.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from backend.competitions.extensions import limiter
from backend.competitions.services import registration_service as svc

logger = logging.getLogger(__name__)

registrations_bp = Blueprint('registrations', __name__)


@registrations_bp.errorhandler(svc.RegistrationServiceError)
def handle_service_error(err: svc.RegistrationServiceError):
    return jsonify({"error": err.code, "message": err.message}), err.status


@registrations_bp.route('/competitions/<competition_id>/register', methods=['GET'])
def competition_register(competition_id: str):
    """Public registration page data: competition, managers and waiting list size."""
    return jsonify(svc.get_competition_summary(competition_id)), 200


@registrations_bp.route('/competitions/<competition_id>/register', methods=['POST'])
@limiter.limit(lambda: current_app.config.get('REGISTRATION_RATE_LIMIT', '10 per hour'))
@jwt_required()
def create_registration(competition_id: str):
    user_id = get_jwt_identity()
    registration = svc.register(competition_id, user_id)
    return jsonify({"registration": registration.to_dict()}), 201


@registrations_bp.route('/registrations/<registration_id>/edit', methods=['GET'])
@jwt_required()
def edit_registration(registration_id: str):
    registration = svc.get_registration(registration_id, get_jwt_identity())
    return jsonify({"registration": registration.to_dict()}), 200


@registrations_bp.route('/registrations/<registration_id>', methods=['PATCH'])
@jwt_required()
def update_registration(registration_id: str):
    data = request.get_json(silent=True) or {}
    status = data.get('status')
    if not isinstance(status, str):
        return jsonify({"error": "validation_failed", "message": "status is required"}), 400
    registration = svc.update_status(registration_id, status, get_jwt_identity())
    return jsonify({"registration": registration.to_dict()}), 200


@registrations_bp.route('/registrations/<registration_id>', methods=['DELETE'])
@jwt_required()
def delete_registration(registration_id: str):
    registration = svc.delete_registration(registration_id, get_jwt_identity())
    return jsonify({"registration": registration.to_dict()}), 200
