"""Category browsing and admin management of categories and their types."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from sqlalchemy.exc import IntegrityError

from intune.auth import admin_required
from intune.database.db_manager import Category, CategoryType, db, parse_object_id


category_bp = Blueprint('category_bp', __name__, url_prefix='/api/categories')


def _category_or_error(category_id: str):
    parsed = parse_object_id(category_id)
    if parsed is None:
        return None, (jsonify({'message': 'Invalid category ID'}), 400)
    category = db.session.get(Category, parsed)
    if category is None:
        return None, (jsonify({'message': 'Category not found'}), 404)
    return category, None


def _name_and_description(payload: dict) -> tuple[str, str | None]:
    name = (payload.get('name') or '').strip()
    description = (payload.get('description') or '').strip() or None
    return name, description


@category_bp.route('', methods=['GET'])
def list_categories():
    categories = Category.query.order_by(Category.name).all()
    return jsonify([category.to_dict() for category in categories]), 200


@category_bp.route('/<category_id>', methods=['GET'])
def get_category(category_id: str):
    category, error = _category_or_error(category_id)
    if error:
        return error
    return jsonify(category.to_dict()), 200


@category_bp.route('', methods=['POST'])
@admin_required
def create_category():
    payload = request.get_json(silent=True) or {}
    name, description = _name_and_description(payload)
    if not name:
        return jsonify({'message': 'Missing required fields', 'missing': ['name']}), 400

    category = Category(name=name[:120], description=description)
    for entry in payload.get('types') or []:
        type_name, type_description = _name_and_description(entry if isinstance(entry, dict) else {'name': entry})
        if type_name:
            category.types.append(CategoryType(name=type_name[:120], description=type_description))
    db.session.add(category)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'message': 'Category already exists'}), 409
    return jsonify(category.to_dict()), 201


@category_bp.route('/<category_id>/types', methods=['POST'])
@admin_required
def add_category_type(category_id: str):
    category, error = _category_or_error(category_id)
    if error:
        return error
    name, description = _name_and_description(request.get_json(silent=True) or {})
    if not name:
        return jsonify({'message': 'Missing required fields', 'missing': ['name']}), 400

    category.types.append(CategoryType(name=name[:120], description=description))
    db.session.commit()
    return jsonify(category.to_dict()), 201


@category_bp.route('/<category_id>', methods=['DELETE'])
@admin_required
def delete_category(category_id: str):
    category, error = _category_or_error(category_id)
    if error:
        return error
    # Music rows keep the dangling id and list with a null category
    db.session.delete(category)
    db.session.commit()
    return jsonify({'message': 'Category deleted successfully'}), 200


__all__ = ['category_bp']
