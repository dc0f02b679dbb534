"""Static serving of uploaded media with byte-range support."""

from __future__ import annotations

from flask import Blueprint, current_app, send_from_directory

uploads_bp = Blueprint('uploads_bp', __name__, url_prefix='/uploads')


@uploads_bp.route('/<path:filename>', methods=['GET', 'HEAD'])
def serve_upload(filename: str):
    store = current_app.extensions['asset_store']
    # conditional=True answers Range / If-Range with 206 partial content
    response = send_from_directory(store.upload_dir, filename, conditional=True)
    response.headers['Accept-Ranges'] = 'bytes'
    response.headers.setdefault('Cross-Origin-Resource-Policy', 'cross-origin')
    return response


__all__ = ['uploads_bp']
