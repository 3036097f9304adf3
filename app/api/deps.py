from app.database.session import get_db
from app.services.export import SnapshotExporter
from app.services.notifications import EmailNotifier

__all__ = ['get_db', 'get_notifier', 'get_exporter']


def get_notifier() -> EmailNotifier:
    return EmailNotifier()


def get_exporter() -> SnapshotExporter:
    return SnapshotExporter()
