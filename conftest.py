"""
Shared fixtures: in-memory cartridges, manifests and QTI bodies.
"""

import io
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import pytest

from quizcart.config import Settings

IMSCP_NS = "http://www.imsglobal.org/xsd/imscp_v1p1"


def make_zip(entries: Iterable[Tuple[str, Union[str, bytes]]]) -> bytes:
    """Build a zip in memory. Names ending in '/' become directory markers."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            if isinstance(data, str):
                data = data.encode("utf-8")
            zf.writestr(name, data)
    return buffer.getvalue()


def resource_xml(
    identifier: Optional[str],
    resource_type: Optional[str],
    href: Optional[str] = None,
    files: Iterable[str] = (),
    title: Optional[str] = None,
) -> str:
    attrs = []
    if identifier is not None:
        attrs.append(f'identifier="{identifier}"')
    if resource_type is not None:
        attrs.append(f'type="{resource_type}"')
    if href is not None:
        attrs.append(f'href="{href}"')
    inner = "".join(f'<file href="{f}"/>' for f in files)
    if title is not None:
        inner = f"<title>{title}</title>" + inner
    return f"<resource {' '.join(attrs)}>{inner}</resource>"


def manifest_xml(resources: Iterable[str] = (), with_resources: bool = True) -> str:
    body = f"<resources>{''.join(resources)}</resources>" if with_resources else ""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<manifest identifier="M1" xmlns="{IMSCP_NS}">'
        "<organizations/>"
        f"{body}"
        "</manifest>"
    )


def legacy_item(
    ident: Optional[str] = "q1",
    question_type: Optional[str] = "multiple_choice_question",
    text: str = "What is 2 + 2?",
    choices: Iterable[Tuple[str, str]] = (("A", "3"), ("B", "4")),
    correct: Iterable[str] = ("B",),
    title: Optional[str] = None,
) -> str:
    ident_attr = f' ident="{ident}"' if ident is not None else ""
    title_attr = f' title="{title}"' if title is not None else ""
    metadata = ""
    if question_type is not None:
        metadata = (
            "<itemmetadata><qtimetadata>"
            "<qtimetadatafield><fieldlabel>points_possible</fieldlabel><fieldentry>2</fieldentry></qtimetadatafield>"
            f"<qtimetadatafield><fieldlabel>question_type</fieldlabel><fieldentry>{question_type}</fieldentry></qtimetadatafield>"
            "</qtimetadata></itemmetadata>"
        )
    labels = "".join(
        f'<response_label ident="{cid}"><material><mattext>{ctext}</mattext></material></response_label>'
        for cid, ctext in choices
    )
    conditions = "".join(
        "<respcondition><conditionvar>"
        f"<varequal respident=\"response1\">{value}</varequal>"
        "</conditionvar><setvar action=\"Set\" varname=\"SCORE\">100</setvar></respcondition>"
        for value in correct
    )
    return (
        f"<item{ident_attr}{title_attr}>{metadata}"
        f"<presentation><material><mattext texttype=\"text/html\">{text}</mattext></material>"
        f"<render_choice>{labels}</render_choice></presentation>"
        f"<resprocessing>{conditions}</resprocessing>"
        "</item>"
    )


def legacy_quiz(items: Iterable[str] = (), title: Optional[str] = "Week 1 Quiz",
                description: Union[None, str, Iterable[str]] = None,
                sections: Iterable[List[str]] = ()) -> str:
    """A questestinterop document. Several descriptions emit one qmd_description field each."""
    title_attr = f' title="{title}"' if title is not None else ""
    metadata = ""
    if description is not None:
        descriptions = [description] if isinstance(description, str) else list(description)
        fields = "".join(
            f"<qtimetadatafield><fieldlabel>qmd_description</fieldlabel><fieldentry>{d}</fieldentry></qtimetadatafield>"
            for d in descriptions
        )
        metadata = (
            "<qtimetadata>"
            "<qtimetadatafield><fieldlabel>qmd_timelimit</fieldlabel><fieldentry>30</fieldentry></qtimetadatafield>"
            f"{fields}"
            "</qtimetadata>"
        )
    section_xml = "".join(f"<section ident=\"s{i}\">{''.join(s)}</section>" for i, s in enumerate(sections))
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<questestinterop>'
        f'<assessment ident="a1"{title_attr}>{metadata}{"".join(items)}{section_xml}</assessment>'
        '</questestinterop>'
    )


def modern_item(
    identifier: Optional[str] = "i1",
    interaction: Optional[str] = "choiceInteraction",
    prompt: str = "Pick one",
    choices: Iterable[Tuple[str, str]] = (("c1", "Red"), ("c2", "Blue")),
    correct: Iterable[str] = ("c1",),
) -> str:
    id_attr = f' identifier="{identifier}"' if identifier is not None else ""
    values = "".join(f"<value>{v}</value>" for v in correct)
    declaration = (
        f'<responseDeclaration identifier="RESPONSE"><correctResponse>{values}</correctResponse></responseDeclaration>'
        if values else ""
    )
    body = f"<prompt>{prompt}</prompt>"
    if interaction == "choiceInteraction":
        simple = "".join(f'<simpleChoice identifier="{cid}">{ctext}</simpleChoice>' for cid, ctext in choices)
        body += f'<choiceInteraction responseIdentifier="RESPONSE">{simple}</choiceInteraction>'
    elif interaction is not None:
        body += f'<{interaction} responseIdentifier="RESPONSE"/>'
    return f"<item{id_attr}>{declaration}<itemBody>{body}</itemBody></item>"


def modern_quiz(items: Iterable[str] = (), title: Optional[str] = "Modern Quiz") -> str:
    title_attr = f' title="{title}"' if title is not None else ""
    return f'<?xml version="1.0"?><assessment identifier="A"{title_attr}>{"".join(items)}</assessment>'


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(workspace_root=tmp_path / "work", output_dir=tmp_path / "forms")
