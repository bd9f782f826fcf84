"""
Report store - thin façade over Firestore (reports collection) and Storage.

Every other service goes through this module. Each method is a single
independent request; there are no transactions and the last write wins.
SDK failures surface as StoreError / UploadError.
"""

from google.api_core.exceptions import GoogleAPIError, NotFound
from app.config.firebase import get_db, get_bucket
from app.core.exceptions import ReportNotFoundError, StoreError, UploadError
from app.models.report import Report
from app.utils.firestore_helpers import where_filter
from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

REPORTS_COLLECTION = "reports"


def _newest_first(reports: List[Report]) -> List[Report]:
    return sorted(
        reports,
        key=lambda r: r.created_at or datetime.min.replace(tzinfo=timezone.utc),
        reverse=True,
    )


class ReportStore:
    """
    Store client for reports and report images.
    """

    def __init__(self, db=None, bucket=None):
        self._db = db
        self._bucket = bucket

    @property
    def db(self):
        return self._db if self._db is not None else get_db()

    @property
    def bucket(self):
        return self._bucket if self._bucket is not None else get_bucket()

    def create_report(self, fields: Dict) -> Report:
        """
        Insert a report row and return it with its generated ID.

        Args:
            fields: Report fields (without id)

        Returns:
            Report: The stored report
        """
        try:
            doc_ref = self.db.collection(REPORTS_COLLECTION).document()
            doc_ref.set(fields)
        except (GoogleAPIError, RuntimeError) as e:
            logger.error(f"Failed to save report to Firestore: {e}", exc_info=True)
            raise StoreError(f"Failed to save report: {e}")

        logger.info(f"Report saved to Firestore: {doc_ref.id}")
        return Report.from_document(doc_ref.id, fields)

    def get_report(self, report_id: str) -> Report:
        try:
            doc = self.db.collection(REPORTS_COLLECTION).document(report_id).get()
        except (GoogleAPIError, RuntimeError) as e:
            logger.error(f"Failed to read report {report_id}: {e}", exc_info=True)
            raise StoreError(f"Failed to read report: {e}")

        if not doc.exists:
            raise ReportNotFoundError(f"Report {report_id} not found")
        try:
            return Report.from_document(doc.id, doc.to_dict())
        except ValueError as e:
            logger.error(f"Report {report_id} is malformed: {e}")
            raise StoreError(f"Report {report_id} could not be read")

    def list_reports(
        self,
        status: Optional[str] = None,
        wallet_address: Optional[str] = None,
        blacklisted: Optional[bool] = None,
    ) -> List[Report]:
        """
        Fetch reports matching the given equality filters.

        Sorting happens in Python (newest first) so the filters never need a
        composite Firestore index.

        Args:
            status: Filter by status (e.g., "pending")
            wallet_address: Filter by submitter identity
            blacklisted: Filter by is_blacklisted flag

        Returns:
            List of reports ordered by created_at descending
        """
        query = self.db.collection(REPORTS_COLLECTION)

        if status:
            query = where_filter(query, "status", "==", status)
        if wallet_address:
            query = where_filter(query, "wallet_address", "==", wallet_address)
        if blacklisted is not None:
            query = where_filter(query, "is_blacklisted", "==", blacklisted)

        try:
            snapshots = list(query.stream())
        except (GoogleAPIError, RuntimeError) as e:
            logger.error(f"Failed to list reports: {e}", exc_info=True)
            raise StoreError(f"Failed to load reports: {e}")

        reports = []
        for doc in snapshots:
            try:
                reports.append(Report.from_document(doc.id, doc.to_dict()))
            except ValueError as e:
                # pydantic ValidationError subclasses ValueError
                logger.warning(f"Skipping malformed report {doc.id}: {e}")

        logger.info(
            f"Retrieved {len(reports)} reports with filters: status={status}, "
            f"wallet_address={wallet_address}, blacklisted={blacklisted}"
        )
        return _newest_first(reports)

    def update_report(self, report_id: str, fields: Dict) -> None:
        """
        Apply a partial update to one report.

        Raises:
            ReportNotFoundError: If the report does not exist
            StoreError: On any other write failure
        """
        try:
            self.db.collection(REPORTS_COLLECTION).document(report_id).update(fields)
        except NotFound:
            raise ReportNotFoundError(f"Report {report_id} not found")
        except (GoogleAPIError, RuntimeError) as e:
            logger.error(f"Failed to update report {report_id}: {e}", exc_info=True)
            raise StoreError(f"Failed to update report: {e}")

        logger.info(f"Report {report_id} updated: {sorted(fields.keys())}")

    def upload_file(self, path: str, data: bytes, content_type: str) -> str:
        """
        Upload bytes to object storage and return a public URL.

        Raises:
            UploadError: If the write or publish step fails
        """
        try:
            blob = self.bucket.blob(path)
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
        except (GoogleAPIError, RuntimeError) as e:
            logger.error(f"Failed to upload {path}: {e}", exc_info=True)
            raise UploadError(f"Image upload failed: {e}")

        logger.info(f"Uploaded {len(data)} bytes to {path}")
        return blob.public_url


_report_store = None


def get_report_store() -> ReportStore:
    """
    Get or create ReportStore singleton instance.
    """
    global _report_store
    if _report_store is None:
        _report_store = ReportStore()
    return _report_store
