"""Read access to the treatment catalog tables."""

from collections import defaultdict
from uuid import UUID

from rehabtrack.core.database.repository import CassandraRepository

from .models import (
    Assessment,
    Category,
    ContentItem,
    LearningModule,
    Program,
    Question,
    QuestionOption,
)


class CatalogRepository(CassandraRepository):
    """Catalog lookups: programs, modules, content and assessments."""

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        # Categories and programs
        self._get_category = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.program_categories WHERE id = ?
        """)

        self._get_program = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.treatment_programs WHERE id = ?
        """)

        self._get_programs_by_ids = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.treatment_programs WHERE id IN ?
        """)

        self._get_programs_by_category = self.session.prepare(f"""
            SELECT program_id, is_active FROM {self.keyspace}.programs_by_category
            WHERE category_id = ?
        """)

        # Modules and content
        self._get_module = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.learning_modules WHERE id = ?
        """)

        self._get_modules_by_ids = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.learning_modules WHERE id IN ?
        """)

        self._get_module_ids_by_program = self.session.prepare(f"""
            SELECT module_id FROM {self.keyspace}.modules_by_program
            WHERE program_id = ?
        """)

        self._get_content_items = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.content_items WHERE module_id = ?
        """)

        self._count_content_items = self.session.prepare(f"""
            SELECT module_id, COUNT(*) AS item_count
            FROM {self.keyspace}.content_items
            WHERE module_id IN ?
            GROUP BY module_id
        """)

        # Assessments
        self._get_assessment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.assessments WHERE id = ?
        """)

        self._get_assessments_by_ids = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.assessments WHERE id IN ?
        """)

        self._get_assessment_ids_by_program = self.session.prepare(f"""
            SELECT assessment_id FROM {self.keyspace}.assessments_by_program
            WHERE program_id IN ?
        """)

        self._get_questions = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.assessment_questions WHERE assessment_id = ?
        """)

        self._get_options = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.question_options WHERE assessment_id = ?
        """)

    # ==========================================================================
    # Categories and Programs
    # ==========================================================================

    async def get_category(self, category_id: UUID) -> Category | None:
        row = await self._fetch_one(
            self._get_category, [category_id], operation="get_category"
        )
        return Category.from_row(row) if row else None

    async def get_program(self, program_id: UUID) -> Program | None:
        row = await self._fetch_one(
            self._get_program, [program_id], operation="get_program"
        )
        return Program.from_row(row) if row else None

    async def get_programs(self, program_ids: list[UUID]) -> list[Program]:
        """Get programs by ID, sorted by title."""
        if not program_ids:
            return []
        rows = await self._fetch_all(
            self._get_programs_by_ids, [list(program_ids)], operation="get_programs"
        )
        return sorted((Program.from_row(r) for r in rows), key=lambda p: p.title)

    async def list_active_programs(self, category_id: UUID) -> list[Program]:
        """List active programs in a category, sorted by title."""
        rows = await self._fetch_all(
            self._get_programs_by_category,
            [category_id],
            operation="list_active_programs",
        )
        program_ids = [r.program_id for r in rows if r.is_active is not False]
        programs = await self.get_programs(program_ids)
        return [p for p in programs if p.is_active]

    # ==========================================================================
    # Modules and Content
    # ==========================================================================

    async def get_module(self, module_id: UUID) -> LearningModule | None:
        row = await self._fetch_one(
            self._get_module, [module_id], operation="get_module"
        )
        return LearningModule.from_row(row) if row else None

    async def list_modules(self, program_id: UUID) -> list[LearningModule]:
        """List a program's modules in sequence order."""
        id_rows = await self._fetch_all(
            self._get_module_ids_by_program, [program_id], operation="list_modules"
        )
        module_ids = [r.module_id for r in id_rows]
        if not module_ids:
            return []

        rows = await self._fetch_all(
            self._get_modules_by_ids, [module_ids], operation="list_modules"
        )
        modules = [LearningModule.from_row(r) for r in rows]
        return sorted(modules, key=lambda m: m.sequence_number)

    async def list_content_items(self, module_id: UUID) -> list[ContentItem]:
        """List a module's content items in sequence order (clustering order)."""
        rows = await self._fetch_all(
            self._get_content_items, [module_id], operation="list_content_items"
        )
        return [ContentItem.from_row(r) for r in rows]

    async def count_content_items(self, module_ids: list[UUID]) -> dict[UUID, int]:
        """Count content items per module in a single query.

        Modules without content are absent from the result.
        """
        if not module_ids:
            return {}
        rows = await self._fetch_all(
            self._count_content_items,
            [list(module_ids)],
            operation="count_content_items",
        )
        return {r.module_id: r.item_count for r in rows}

    # ==========================================================================
    # Assessments
    # ==========================================================================

    async def get_assessment(self, assessment_id: UUID) -> Assessment | None:
        row = await self._fetch_one(
            self._get_assessment, [assessment_id], operation="get_assessment"
        )
        return Assessment.from_row(row) if row else None

    async def list_program_assessments(
        self, program_ids: list[UUID]
    ) -> list[Assessment]:
        """List assessments belonging to any of the given programs."""
        if not program_ids:
            return []
        id_rows = await self._fetch_all(
            self._get_assessment_ids_by_program,
            [list(program_ids)],
            operation="list_program_assessments",
        )
        assessment_ids = [r.assessment_id for r in id_rows]
        if not assessment_ids:
            return []

        rows = await self._fetch_all(
            self._get_assessments_by_ids,
            [assessment_ids],
            operation="list_program_assessments",
        )
        return sorted((Assessment.from_row(r) for r in rows), key=lambda a: a.title)

    async def list_questions(self, assessment_id: UUID) -> list[Question]:
        """Load all questions of an assessment with their options.

        Two partition reads regardless of the number of questions.
        """
        question_rows = await self._fetch_all(
            self._get_questions, [assessment_id], operation="list_questions"
        )
        option_rows = await self._fetch_all(
            self._get_options, [assessment_id], operation="list_questions"
        )

        options: dict[UUID, list[QuestionOption]] = defaultdict(list)
        for row in option_rows:
            options[row.question_id].append(QuestionOption.from_row(row))

        return [Question.from_row(r, options.get(r.id, [])) for r in question_rows]
