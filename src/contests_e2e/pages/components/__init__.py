"""Components shared across screens."""

from contests_e2e.pages.components.header import HEADER, HeaderComponent
from contests_e2e.pages.components.modal import MODAL, ModalComponent
from contests_e2e.pages.components.notification import NOTIFICATIONS, NotificationComponent

__all__ = [
    "HEADER",
    "HeaderComponent",
    "MODAL",
    "ModalComponent",
    "NOTIFICATIONS",
    "NotificationComponent",
]
