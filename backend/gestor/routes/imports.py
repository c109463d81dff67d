# Overview: Flask API route for bulk product import.

# backend/gestor/routes/imports.py
"""
Bulk product import.

Accepts either a JSON body {"rows": [{...}, ...]} produced by a spreadsheet
reader on the client, or a multipart upload with a CSV "file".
The import is all-or-nothing; failing rows are reported by row number.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, json_body, require_auth, require_permission
from ..permissions import Action, Module
from ..services.import_service import read_csv_rows

imports_bp = Blueprint("imports", __name__, url_prefix="/api/imports")


@imports_bp.post("/products")
@require_auth
@require_permission(Module.INVENTORY, Action.CREATE)
@handle_service_errors
def import_products_route():
    upload = request.files.get("file")
    if upload is not None:
        try:
            text = upload.read().decode("utf-8-sig")
        except UnicodeDecodeError:
            return jsonify({"error": "CSV file must be UTF-8 encoded"}), 400
        rows = read_csv_rows(text)
    else:
        data = json_body()
        rows = data.get("rows")
        if not isinstance(rows, list):
            return jsonify({"error": "rows must be a list"}), 400

    report = g.services.facade.bulk_import(g.current_employee, rows)
    return jsonify(report.to_dict()), 201
