"""
Firebase initialization.
Single-source-of-truth Firestore client and Storage bucket for Civic Guard.
"""

import json
import os
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore, initialize_app, storage

from app.core.settings import settings

db: Optional[firestore.Client] = None
bucket: Optional[Any] = None


def _validate_credentials_file(cred_path: str) -> None:
    if not os.path.exists(cred_path):
        raise FileNotFoundError(
            f"Firebase credentials file not found: {cred_path}\n"
            f"Please check your .env file and ensure FIREBASE_CREDENTIALS_PATH is correct.\n"
            f"Current working directory: {os.getcwd()}"
        )

    try:
        with open(cred_path, "r") as f:
            cred_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(
            f"Firebase credentials file is not valid JSON: {e}\n"
            f"Please check the file at: {cred_path}"
        )

    required_fields = ["type", "project_id", "private_key", "client_email"]
    missing_fields = [field for field in required_fields if field not in cred_data]
    if missing_fields:
        raise ValueError(
            f"Firebase credentials file is missing required fields: {missing_fields}\n"
            f"Please download a fresh service account key from Firebase Console."
        )

    print(f"[FIREBASE] Credentials file validated: {cred_path}")
    print(f"[FIREBASE] Project ID: {cred_data.get('project_id', 'N/A')}")


def _initialize_app() -> None:
    if firebase_admin._apps:
        return

    options = {}
    if settings.FIREBASE_STORAGE_BUCKET:
        options["storageBucket"] = settings.FIREBASE_STORAGE_BUCKET
    if settings.FIREBASE_PROJECT_ID:
        options["projectId"] = settings.FIREBASE_PROJECT_ID

    if settings.FIREBASE_CREDENTIALS_PATH:
        _validate_credentials_file(settings.FIREBASE_CREDENTIALS_PATH)
        cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
        initialize_app(cred, options or None)
        print("[FIREBASE] Firebase Admin SDK initialized with service account")
    else:
        print("[FIREBASE] No credentials path set, using Application Default Credentials")
        initialize_app(options=options or None)


def ensure_firebase_app() -> None:
    """
    Initialize the default Firebase app for the Admin SDK auth calls.
    No-op in mock mode, where auth calls are expected to be stubbed.
    """
    if settings.USE_MOCK_DB:
        return
    _initialize_app()


def initialize_firestore() -> firestore.Client:
    global db

    if db is not None:
        return db

    if settings.USE_MOCK_DB:
        from app.config.mock_firestore import get_mock_db
        db = get_mock_db(settings.MOCK_DB_PATH)
        print("[FIRESTORE] USING MOCK DATABASE")
        return db

    try:
        _initialize_app()
        db = firestore.client()
        print("[FIRESTORE] USING REAL FIRESTORE DATABASE")
        print(f"[FIRESTORE] Project: {settings.FIREBASE_PROJECT_ID or 'default'}")
        return db

    except FileNotFoundError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Credentials file not found.\n"
            f"{str(e)}\n"
            f"SOLUTION: Check your .env file and ensure FIREBASE_CREDENTIALS_PATH points to a valid service account JSON file."
        )
    except ValueError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Invalid credentials file.\n"
            f"{str(e)}\n"
            f"SOLUTION: Download a fresh service account key from Firebase Console:\n"
            f"1. Go to Firebase Console > Project Settings > Service Accounts\n"
            f"2. Click 'Generate New Private Key'\n"
            f"3. Save the JSON file and update FIREBASE_CREDENTIALS_PATH in .env"
        )
    except Exception as e:
        raise RuntimeError(
            f"Firestore initialization FAILED. Error: {str(e)}\n"
            f"Please check your Firebase credentials and configuration."
        )


def get_db() -> firestore.Client:
    """
    Get the initialized Firestore client.

    Raises RuntimeError if Firestore has not been initialized.
    """
    if db is None:
        try:
            initialize_firestore()
        except Exception as e:
            raise RuntimeError(
                f"Firestore not initialized and initialization failed: {e}. "
                "Please check your Firebase credentials and configuration."
            )
    return db


def get_bucket():
    """
    Get the Storage bucket report images are uploaded to.

    Mirrors get_db(): mock bucket when USE_MOCK_DB is set, otherwise the
    default bucket of the initialized Firebase app.
    """
    global bucket

    if bucket is not None:
        return bucket

    if settings.USE_MOCK_DB:
        from app.config.mock_firestore import get_mock_bucket
        bucket = get_mock_bucket(settings.FIREBASE_STORAGE_BUCKET or "civic-guard-mock")
        print("[STORAGE] USING MOCK BUCKET")
        return bucket

    try:
        _initialize_app()
        bucket = storage.bucket()
    except Exception as e:
        raise RuntimeError(
            f"Storage initialization FAILED. Error: {str(e)}\n"
            f"Set FIREBASE_STORAGE_BUCKET in .env to the project's default bucket."
        )
    print(f"[STORAGE] Using bucket: {bucket.name}")
    return bucket
