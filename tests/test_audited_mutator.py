"""Tests for audit-stamped writes."""

from sqlalchemy import Integer, String, select
from sqlalchemy.orm import Mapped, mapped_column

from payslip_engine.models import Auditable, Base, Employee
from payslip_engine.services.audited_mutator import AuditedMutator


class ScratchNote(Base):
    """Plain model with no audit columns."""

    __tablename__ = "scratch_note"

    note_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    body: Mapped[str] = mapped_column(String(100), nullable=False)


class TestCreateAndSave:
    """Test created_by/updated_by stamping."""

    async def test_create_stamps_created_by(self, session):
        employee = await AuditedMutator(session, 7).create(Employee(name="Ana"))

        assert employee.employee_id is not None
        assert employee.created_by == 7
        assert employee.updated_by is None

    async def test_save_stamps_updated_by(self, session, factory):
        employee = await factory.employee("Ben")
        employee.name = "Benjamin"

        await AuditedMutator(session, 9).save(employee)

        assert employee.updated_by == 9
        stored = await session.scalar(
            select(Employee.name).where(Employee.employee_id == employee.employee_id)
        )
        assert stored == "Benjamin"

    async def test_zero_actor_recorded_as_none(self, session):
        employee = await AuditedMutator(session, 0).create(Employee(name="System"))

        assert employee.created_by is None

    async def test_non_auditable_entity(self, session):
        mutator = AuditedMutator(session, 7)
        note = ScratchNote(body="hello")

        assert not isinstance(note, Auditable)
        await mutator.create(note)
        note.body = "changed"
        await mutator.save(note)

        assert note.note_id is not None


class TestUpdate:
    """Test conditional partial updates."""

    async def test_update_injects_updated_by(self, session, factory):
        employee = await factory.employee("Cara")
        values = {"name": "Carla"}

        count = await AuditedMutator(session, 3).update(
            Employee, values, Employee.employee_id == employee.employee_id
        )

        assert count == 1
        assert values == {"name": "Carla"}
        row = (
            await session.execute(
                select(Employee.name, Employee.updated_by).where(
                    Employee.employee_id == employee.employee_id
                )
            )
        ).one()
        assert row.name == "Carla"
        assert row.updated_by == 3

    async def test_update_without_audit_column(self, session):
        note = await AuditedMutator(session).create(ScratchNote(body="a"))

        count = await AuditedMutator(session, 3).update(
            ScratchNote, {"body": "b"}, ScratchNote.note_id == note.note_id
        )

        assert count == 1


class TestDelete:
    """Test soft and hard deletes."""

    async def test_delete_instance_soft(self, session, factory):
        employee = await factory.employee("Dan")

        await AuditedMutator(session, 4).delete(employee)

        assert employee.deleted_by == 4
        assert employee.deleted_at is not None
        assert employee.is_deleted

    async def test_delete_where_stamps_deleted_by(self, session, factory):
        keep = await factory.employee("Eve")
        gone = await factory.employee("Finn")

        count = await AuditedMutator(session, 5).delete(
            Employee, Employee.employee_id == gone.employee_id
        )

        assert count == 1
        rows = (
            await session.execute(
                select(Employee.employee_id, Employee.deleted_by, Employee.deleted_at)
                .order_by(Employee.employee_id)
            )
        ).all()
        by_id = {r.employee_id: r for r in rows}
        assert by_id[gone.employee_id].deleted_by == 5
        assert by_id[gone.employee_id].deleted_at is not None
        assert by_id[keep.employee_id].deleted_by is None
        assert by_id[keep.employee_id].deleted_at is None

    async def test_delete_where_skips_already_deleted(self, session, factory):
        employee = await factory.employee("Gus")
        await AuditedMutator(session, 5).delete(employee)

        count = await AuditedMutator(session, 6).delete(
            Employee, Employee.employee_id == employee.employee_id
        )

        assert count == 0
        deleted_by = await session.scalar(
            select(Employee.deleted_by).where(Employee.employee_id == employee.employee_id)
        )
        assert deleted_by == 5

    async def test_hard_delete_without_soft_delete_column(self, session):
        mutator = AuditedMutator(session, 1)
        note = await mutator.create(ScratchNote(body="temp"))

        await mutator.delete(note)

        remaining = await session.scalar(select(ScratchNote).where(ScratchNote.note_id == note.note_id))
        assert remaining is None
