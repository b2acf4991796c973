"""
Enregistrement d'un élève : attribution de l'id, génération du QR code,
persistance dans le registre.
"""

import uuid
from typing import Optional

from qrattendance.schemas.student import NO_IMAGE_PLACEHOLDER_URL, StudentCreate, StudentRecord
from qrattendance.services.clock import Clock, SystemClock
from qrattendance.services.qr_service import qr_data_url
from qrattendance.services.student_store import StudentStore


def register_student(store: StudentStore, data: StudentCreate, clock: Optional[Clock] = None) -> StudentRecord:
    """
    Crée l'élève avec un id uuid4 (collision négligeable, non vérifiée) et le
    QR code qui encode cet id. Sans photo de carte, une image générique est utilisée.
    Lève StorageError si l'écriture échoue.
    """
    clock = clock or SystemClock()
    student_id = str(uuid.uuid4())

    record = StudentRecord(
        id=student_id,
        name=data.name,
        father_name=data.father_name,
        school_name=data.school_name,
        class_name=data.class_name,
        section=data.section,
        roll_number=data.roll_number,
        gender=data.gender,
        icard_image_url=data.icard_image_url or NO_IMAGE_PLACEHOLDER_URL,
        qr_image_url=qr_data_url(student_id),
        created_at=clock.now().isoformat(),
    )
    store.add(record)
    return record
