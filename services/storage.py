import os
import time

from flask import current_app
from werkzeug.utils import secure_filename

from errors import ValidationError


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in current_app.config["ALLOWED_EXTENSIONS"]


def save_upload(fileobj, subdir):
    """Store an uploaded file under the upload folder and return its public URL."""
    if not fileobj or not fileobj.filename:
        raise ValidationError("File is required")
    if not allowed_file(fileobj.filename):
        raise ValidationError("File type not allowed")

    safe = secure_filename(fileobj.filename)
    fname = f"{int(time.time()*1000)}_{safe}"
    base = os.path.join(current_app.config["UPLOAD_FOLDER"], subdir)
    os.makedirs(base, exist_ok=True)
    fileobj.save(os.path.join(base, fname))
    return f"{current_app.config['UPLOAD_URL_PREFIX']}/{subdir}/{fname}"
