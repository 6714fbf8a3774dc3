from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from errors import ValidationError
from services import youtube
from services.storage import allowed_file, save_upload

media_bp = Blueprint("media", __name__)

MAX_CAR_IMAGES = 10


# Upload file chung
@media_bp.route("/upload", methods=["POST"])
@login_required
def upload_file():
    file = request.files.get("file")
    if not file or not file.filename:
        raise ValidationError("No file provided")
    url = save_upload(file, f"files/user-{current_user.id}")
    return jsonify({"message": "File uploaded successfully", "fileName": file.filename, "url": url}), 201


# Upload ảnh xe (tối đa 10 ảnh)
@media_bp.route("/upload-car-images", methods=["POST"])
@login_required
def upload_car_images():
    files = [f for f in request.files.getlist("files") if f and f.filename]
    if not files:
        raise ValidationError("No files provided")
    if len(files) > MAX_CAR_IMAGES:
        raise ValidationError(f"Maximum {MAX_CAR_IMAGES} images allowed")
    if not all(allowed_file(f.filename) for f in files):
        raise ValidationError("Only image files are allowed")

    urls = [save_upload(f, "cars") for f in files]
    return jsonify({"message": "Images uploaded successfully", "imageUrls": urls}), 201


@media_bp.route("/youtube")
def room_youtube():
    return jsonify(youtube.room_videos(request.args.get("roomName")))
