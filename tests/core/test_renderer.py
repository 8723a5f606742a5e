"""
Test suite for response rendering.

Covers course answer templates, listings, the enrollment follow-up and
parsing of generated text into blocks.

System role: Verification of deterministic answer templates
"""

import pytest

from course_assistant.core.catalog import CourseCatalog
from course_assistant.core.policy_engine import PolicyEngine
from course_assistant.core.renderer import ResponseRenderer, markdown_to_html
from course_assistant.models.intent import Intent, IntentType
from course_assistant.models.rendering import BlockKind, LinkKind
from course_assistant.models.session import OfferedCourse


def _course_intent(intent_type: IntentType, course_id: str, **kwargs) -> Intent:
    return Intent(type=intent_type, course_id=course_id, **kwargs)


class TestCourseAnswers:
    """Templates for questions about one course."""

    def test_enrollment_link_for_open_course(self, renderer: ResponseRenderer) -> None:
        # Act
        document = renderer.render(_course_intent(IntentType.ENROLLMENT_LINK, "1"))

        # Assert
        text = document.to_text()
        assert text.startswith("En el curso <strong>Curso de Costura</strong>, ")
        assert 'href="https://forms.gle/abc123"' in text
        assert document.blocks[0].enrollment_links()[0].url == "https://forms.gle/abc123"

    def test_enrollment_link_for_upcoming_course_states_not_open(self, renderer: ResponseRenderer) -> None:
        document = renderer.render(_course_intent(IntentType.ENROLLMENT_LINK, "2"))

        text = document.to_text()
        assert "forms.gle" not in text
        assert "la inscripción aún no está habilitada" in text

    def test_fact_answer_for_upcoming_course_carries_status_note(self, renderer: ResponseRenderer) -> None:
        document = renderer.render(_course_intent(IntentType.START_DATE, "2"))

        assert document.to_text() == (
            "En el curso <strong>Curso de Electricidad Domiciliaria</strong>, se inicia el 1 de agosto."
            "<br>En el curso <strong>Curso de Electricidad Domiciliaria</strong>, la inscripción aún no está habilitada."
        )

    @pytest.mark.parametrize("course_id", ["3", "42"])
    def test_closed_course_gets_refusal_for_any_intent(self, renderer: ResponseRenderer, course_id: str) -> None:
        document = renderer.render(_course_intent(IntentType.SCHEDULE, course_id))

        assert len(document.blocks) == 1
        assert document.blocks[0].kind == BlockKind.REFUSAL

    def test_schedule(self, renderer: ResponseRenderer) -> None:
        text = renderer.render(_course_intent(IntentType.SCHEDULE, "1")).to_text()

        assert "Lunes 18 a 21 h; Miércoles 18 a 21 h" in text
        assert "Frecuencia semanal: 2." in text

    def test_requirements_lists_flags_and_other(self, renderer: ResponseRenderer) -> None:
        text = renderer.render(_course_intent(IntentType.REQUIREMENTS, "1")).to_text()

        assert text == "En el curso <strong>Curso de Costura</strong>, los requisitos son: Ser mayor de 18 años, DNI vigente."

    def test_requirements_absent(self, renderer: ResponseRenderer) -> None:
        text = renderer.render(_course_intent(IntentType.REQUIREMENTS, "5")).to_text()

        assert "no hay requisitos publicados" in text

    def test_materials(self, renderer: ResponseRenderer) -> None:
        text = renderer.render(_course_intent(IntentType.MATERIALS, "1")).to_text()

        assert "el estudiante aporta: Tijera, Hilo" in text
        assert "el curso entrega: Tela" in text

    def test_missing_end_date(self, renderer: ResponseRenderer) -> None:
        text = renderer.render(_course_intent(IntentType.END_DATE, "5")).to_text()

        assert text == "En el curso <strong>Curso de Peluquería</strong>, fecha de finalización: sin fecha confirmada."

    def test_unpublished_field_points_to_reference(self, renderer: ResponseRenderer) -> None:
        document = renderer.render(_course_intent(IntentType.UNPUBLISHED_FIELD, "1"))

        assert "no está publicada" in document.to_text()
        assert document.blocks[0].links[0].kind == LinkKind.REFERENCE

    def test_general_info_card(self, renderer: ResponseRenderer) -> None:
        document = renderer.render(_course_intent(IntentType.GENERAL_INFO, "1"))

        text = document.to_text()
        assert "Aprendé a confeccionar prendas básicas." in text
        assert "Inicio: 15 de junio." in text
        assert "Estado: Inscripción abierta." in text
        assert 'href="/curso/1?y=2025"' in text

    def test_open_ended_general_info_is_left_to_the_model(self, renderer: ResponseRenderer) -> None:
        assert renderer.render(_course_intent(IntentType.GENERAL_INFO, "1", open_ended=True)) is None

    def test_unknown_and_missing_course_render_nothing(self, renderer: ResponseRenderer) -> None:
        assert renderer.render(Intent(type=IntentType.UNKNOWN)) is None
        assert renderer.render(_course_intent(IntentType.SCHEDULE, "404")) is None


class TestListings:
    """Topic and locality listings."""

    def test_topic_listing_excludes_closed_and_puts_open_first(self, renderer: ResponseRenderer) -> None:
        # Act
        document = renderer.render(Intent(type=IntentType.TOPIC_LISTING))

        # Assert
        entries = [block for block in document.blocks if block.kind == BlockKind.LISTING_ENTRY]
        assert [block.course_id for block in entries] == ["1", "5", "2"]

    def test_only_open_entries_get_signup_link(self, renderer: ResponseRenderer) -> None:
        document = renderer.render(Intent(type=IntentType.TOPIC_LISTING))

        by_id = {block.course_id: block for block in document.blocks if block.course_id}
        assert "Inscribirme" in by_id["1"].text
        assert "Inscribirme" not in by_id["2"].text
        assert "más info" in by_id["2"].text

    def test_available_now_lists_only_open(self, renderer: ResponseRenderer) -> None:
        document = renderer.render(Intent(type=IntentType.TOPIC_LISTING, available_now=True))

        ids = [block.course_id for block in document.blocks if block.kind == BlockKind.LISTING_ENTRY]
        assert ids == ["1", "5"]

    def test_listing_is_capped(self, catalog: CourseCatalog, policy: PolicyEngine) -> None:
        renderer = ResponseRenderer(catalog, policy, listing_limit=2)

        document = renderer.render(Intent(type=IntentType.TOPIC_LISTING))

        entries = [block for block in document.blocks if block.kind == BlockKind.LISTING_ENTRY]
        assert len(entries) == 2
        assert document.blocks[-1].text.startswith("Y 1 curso(s) más")

    def test_locality_listing(self, renderer: ResponseRenderer) -> None:
        document = renderer.render(Intent(type=IntentType.LOCALITY_LISTING, locality="palpala"))

        assert document.blocks[0].text == "Cursos disponibles en Palpalá:"
        ids = [block.course_id for block in document.blocks if block.kind == BlockKind.LISTING_ENTRY]
        assert ids == ["5", "2"]

    def test_locality_listing_never_shows_closed_courses(self, renderer: ResponseRenderer) -> None:
        document = renderer.render(Intent(type=IntentType.LOCALITY_LISTING, locality="perico"))

        ids = [block.course_id for block in document.blocks if block.kind == BlockKind.LISTING_ENTRY]
        assert ids == ["5"]

    def test_unknown_locality(self, renderer: ResponseRenderer) -> None:
        intent = Intent(type=IntentType.LOCALITY_LISTING, locality="tilcara", locality_text="Tilcara")

        text = renderer.render(intent).to_text()

        assert text == (
            "No encontré cursos disponibles en Tilcara. "
            "Hay cursos en: San Salvador de Jujuy, Palpalá, Perico."
        )


class TestEnrollmentGeneral:
    """Enrollment requests without a course in the message."""

    def test_follow_up_uses_last_offered_course(self, renderer: ResponseRenderer) -> None:
        offered = OfferedCourse(course_id="1", title="Curso de Costura", enrollment_form_url="https://forms.gle/abc123")

        document = renderer.render(Intent(type=IntentType.ENROLLMENT_GENERAL), last_offered=offered)

        assert 'href="https://forms.gle/abc123"' in document.to_text()
        assert "Formulario de inscripción" in document.to_text()

    def test_stale_offer_for_closed_course_falls_back_to_open_list(self, renderer: ResponseRenderer) -> None:
        offered = OfferedCourse(course_id="42", title="Curso de Gastronomía", enrollment_form_url="https://forms.gle/gastro42")

        document = renderer.render(Intent(type=IntentType.ENROLLMENT_GENERAL), last_offered=offered)

        assert "forms.gle/gastro42" not in document.to_text()
        ids = [block.course_id for block in document.blocks if block.kind == BlockKind.LISTING_ENTRY]
        assert ids == ["1", "5"]


class TestParseGenerated:
    """Generated text to blocks."""

    def test_markdown_is_converted(self) -> None:
        html = markdown_to_html("El **Curso de Costura** empieza el **15 de junio**. [Ficha](/curso/1?y=2025)")

        assert "<strong>Curso de Costura</strong>" in html
        assert "**" not in html
        assert "el 15 de junio." in html
        assert '<a href="/curso/1?y=2025" target="_blank" rel="noopener">Ficha</a>' in html

    def test_lines_become_blocks_with_course_and_links(self, renderer: ResponseRenderer) -> None:
        # Act
        document = renderer.parse_generated(
            "Hola!\n\nEl Curso de Costura tiene inscripción abierta: https://forms.gle/abc123\n"
        )

        # Assert
        assert document.generated is True
        assert [block.text for block in document.blocks][0] == "Hola!"
        block = document.blocks[1]
        assert block.kind == BlockKind.GENERATED
        assert block.course_id == "1"
        assert [(link.url, link.kind) for link in block.links] == [("https://forms.gle/abc123", LinkKind.ENROLLMENT)]
        assert document.to_text().count("\n") == 1


class TestUnknownLocalityWording:
    """The missing locality is echoed as the user wrote it."""

    @pytest.mark.parametrize(
        ("locality", "written"),
        [("tumbaya", "Tumbayá"), ("humahuaca", "humahuaca"), ("la quiaca", "La QUIACA")],
    )
    def test_written_form_is_kept(self, renderer: ResponseRenderer, locality: str, written: str) -> None:
        intent = Intent(type=IntentType.LOCALITY_LISTING, locality=locality, locality_text=written)

        text = renderer.render(intent).to_text()

        assert text.startswith(f"No encontré cursos disponibles en {written}.")

    def test_normalized_locality_is_the_fallback(self, renderer: ResponseRenderer) -> None:
        text = renderer.render(Intent(type=IntentType.LOCALITY_LISTING, locality="tilcara")).to_text()

        assert text.startswith("No encontré cursos disponibles en tilcara.")
