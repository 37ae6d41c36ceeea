from sqlalchemy import text
from sqlalchemy.orm import Session


class MaterialRepository:
    """
    Read-only lookup of learning materials. The materials table is owned by
    content management, so only raw SELECTs are issued here.
    """

    def get_by_id(self, db: Session, material_id: int) -> dict | None:
        """
        Try the `topic_id` column first, then the older `topics_id` spelling.
        This tolerates schema differences without raising.
        """

        def _run(sql: str):
            return db.execute(text(sql), {"material_id": material_id}).mappings().first()

        try:
            row = _run(
                """
                SELECT id, title, content, topic_id
                FROM materials
                WHERE id = :material_id
                LIMIT 1
                """
            )
            return dict(row) if row else None
        except Exception as exc:  # noqa: BLE001
            if "topic_id" not in str(exc):
                raise
            db.rollback()

        row = _run(
            """
            SELECT id, title, content, topics_id AS topic_id
            FROM materials
            WHERE id = :material_id
            LIMIT 1
            """
        )
        return dict(row) if row else None
