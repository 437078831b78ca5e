"""
Form control recognition.

Maps inputs, textareas, selects, buttons, choice fieldsets and signature
containers to form-field blocks. Labels ending in `*` mark the field as
required and lose the asterisk.
"""

import re
from typing import List, Optional, Sequence, Tuple, Union

from bs4 import NavigableString, Tag

from ..blocks.factory import create_default
from ..models.blocks import BaseBlock, BlockType
from .marks import collapse_text
from .styles import parse_style

CONTROL_TAGS = ("input", "select", "textarea")

TEXT_INPUT_VALIDATION = {
    "text": "none",
    "password": "none",
    "search": "none",
    "email": "email",
    "tel": "phone",
    "number": "number",
    "url": "url",
}
DATE_INPUT_TYPES = frozenset({"date", "datetime-local", "month", "week", "time"})
BUTTON_INPUT_TYPES = frozenset({"submit", "reset", "button", "image"})

SIGNATURE_CLASSES = frozenset({"signdiv", "signature", "signature-area"})

_REQUIRED_SUFFIX_RE = re.compile(r"\s*\*\s*$")


def clean_label(text: Optional[str]) -> Tuple[str, bool]:
    """Strip a trailing required-marker asterisk. Returns (label, required)."""
    text = " ".join((text or "").split())
    if _REQUIRED_SUFFIX_RE.search(text):
        return _REQUIRED_SUFFIX_RE.sub("", text), True
    return text, False


def input_type(tag: Tag) -> str:
    if tag.name != "input":
        return tag.name
    return (tag.get("type") or "text").strip().lower()


def find_controls(tag: Tag) -> List[Tag]:
    """Visible form controls below `tag` (hidden inputs excluded)."""
    return [c for c in tag.find_all(CONTROL_TAGS) if input_type(c) != "hidden"]


def _field_name(tag: Tag) -> Optional[str]:
    return tag.get("name") or tag.get("id") or None


def _max_length(tag: Tag) -> str:
    value = (tag.get("maxlength") or "").strip()
    return value if value.isdigit() else ""


def _form_fields(tag: Tag, label: Optional[str], fallback_label: str) -> dict:
    text, starred = clean_label(label)
    fields = {
        "label": text or tag.get("placeholder") or fallback_label,
        "required": starred or tag.has_attr("required"),
    }
    name = _field_name(tag)
    if name:
        fields["field_name"] = name
    return fields


# ============================================================================
# SINGLE CONTROLS
# ============================================================================

def input_block(tag: Tag, label: Optional[str] = None) -> Optional[BaseBlock]:
    """
    Block for one <input>, chosen by its type.

    Returns:
        Block, or None for hidden inputs
    """
    kind = input_type(tag)
    if kind == "hidden":
        return None

    if kind in DATE_INPUT_TYPES:
        return create_default(BlockType.DATE_PICKER, **_form_fields(tag, label, "Date"))
    if kind == "file":
        fields = _form_fields(tag, label, "File Upload")
        if tag.get("accept"):
            fields["accept_types"] = tag["accept"]
        fields["multiple"] = tag.has_attr("multiple")
        return create_default(BlockType.FILE_UPLOAD, **fields)
    if kind == "checkbox":
        text = label if label is not None else (tag.get("value") or "")
        fields = _form_fields(tag, text, "")
        fields["label"] = clean_label(text)[0]
        return create_default(BlockType.SINGLE_CHECKBOX, **fields)
    if kind == "radio":
        fields = _form_fields(tag, None, "Radio Group")
        option = clean_label(label)[0] if label else (tag.get("value") or "")
        fields["options"] = [option] if option else []
        return create_default(BlockType.RADIO_GROUP, **fields)
    if kind in BUTTON_INPUT_TYPES:
        button_type = kind if kind in ("submit", "reset") else "button"
        text = tag.get("value") or tag.get("alt") or ("Submit" if kind == "submit" else "Button")
        return create_default(BlockType.BUTTON, label=text, button_type=button_type)

    fields = _form_fields(tag, label, "Field")
    fields["placeholder"] = tag.get("placeholder") or ""
    fields["validation_type"] = TEXT_INPUT_VALIDATION.get(kind, "none")
    fields["max_length"] = _max_length(tag)
    return create_default(BlockType.TEXT_INPUT, **fields)


def textarea_block(tag: Tag, label: Optional[str] = None) -> BaseBlock:
    fields = _form_fields(tag, label, "Text Area")
    fields["placeholder"] = tag.get("placeholder") or collapse_text(tag)
    rows = (tag.get("rows") or "").strip()
    if rows.isdigit() and int(rows) > 0:
        fields["rows"] = int(rows)
    fields["max_length"] = _max_length(tag)
    return create_default(BlockType.TEXTAREA, **fields)


def select_block(tag: Tag, label: Optional[str] = None) -> BaseBlock:
    fields = _form_fields(tag, label, "Dropdown")
    options = []
    default_value = ""
    for option in tag.find_all("option"):
        text = collapse_text(option) or (option.get("value") or "")
        # The empty-valued first option is the "Select..." prompt, not a choice
        if option.has_attr("value") and not option["value"].strip():
            continue
        if text:
            options.append(text)
            if option.has_attr("selected"):
                default_value = text
    fields["options"] = options
    fields["default_value"] = default_value
    return create_default(BlockType.DROPDOWN, **fields)


def control_block(tag: Tag, label: Optional[str] = None) -> Optional[BaseBlock]:
    if tag.name == "select":
        return select_block(tag, label)
    if tag.name == "textarea":
        return textarea_block(tag, label)
    return input_block(tag, label)


# ============================================================================
# BUTTONS AND SIGNATURES
# ============================================================================

def is_sign_button(tag: Tag) -> bool:
    return tag.name == "button" and (
        tag.has_attr("data-signature-button") or collapse_text(tag).upper() == "SIGN"
    )


def button_block(tag: Tag) -> BaseBlock:
    """Block for a <button>: a Signature for sign buttons, otherwise a Button."""
    text = collapse_text(tag)
    if is_sign_button(tag):
        return create_default(BlockType.SIGNATURE, label=text or "Sign Here")

    classes = set(tag.get("class") or [])
    variant = "primary"
    if classes & {"btn-secondary", "btn-cancel"}:
        variant = "secondary"
    elif classes & {"btn-outline", "btn-save"}:
        variant = "outline"

    kind = (tag.get("type") or "submit").strip().lower()
    return create_default(
        BlockType.BUTTON,
        label=text or "Button",
        button_type=kind if kind in ("submit", "reset", "button") else "button",
        variant=variant,
    )


def is_signature_container(tag: Tag) -> bool:
    classes = set(tag.get("class") or [])
    return bool(classes & SIGNATURE_CLASSES) or tag.has_attr("data-signature")


def signature_block(tag: Tag) -> BaseBlock:
    """Block for a signature container (`.signdiv`, `.signature`, `[data-signature]`)."""
    label_el = tag.find("label") or tag.find("span", class_="sig-label")
    if label_el is None:
        for span in tag.find_all("span"):
            if not any("btn" in c or "button" in c for c in span.get("class") or []):
                label_el = span
                break
    label, starred = clean_label(collapse_text(label_el) if label_el is not None else "")
    required = starred or tag.find(attrs={"required": True}) is not None

    image = None
    for img in tag.find_all("img"):
        if "signature" in (img.get("class") or []) or "ignature" in (img.get("alt") or ""):
            image = img
            break

    fields = {"label": label or "Signature", "required": required}
    if image is not None and image.get("src"):
        fields["signature_url"] = image["src"]
    return create_default(BlockType.SIGNATURE, **fields)


# ============================================================================
# GROUPS AND LABELLED WRAPPERS
# ============================================================================

def option_source(control: Tag) -> Union[Tag, NavigableString, None]:
    """The node holding a radio/checkbox's option text: wrapping label, sibling label or trailing text."""
    wrapper = control.find_parent("label")
    if wrapper is not None:
        return wrapper
    sibling = control.find_next_sibling("label")
    if sibling is not None and sibling.get("for") in (None, control.get("id")):
        return sibling
    nxt = control.next_sibling
    if isinstance(nxt, NavigableString) and nxt.strip():
        return nxt
    return None


def _choice_label(control: Tag) -> str:
    source = option_source(control)
    if isinstance(source, Tag):
        return collapse_text(source)
    if source is not None:
        return " ".join(source.split())
    return control.get("value") or ""


def is_claimed(node, sources: Sequence) -> bool:
    """True when `node` is one of `sources` or lies inside one of them."""
    if any(node is source for source in sources):
        return True
    return any(parent is source for parent in node.parents for source in sources)


def unclaimed_content(container: Tag, sources: Sequence) -> list:
    """
    Text nodes outside `sources`, plus every image, below `container`.

    A choice group keeps only option texts, so anything returned here would
    be lost if the container were read as a group.
    """
    nodes = [
        s for s in container.find_all(string=True)
        if type(s) is NavigableString and s.strip() and not is_claimed(s, sources)
    ]
    return nodes + container.find_all("img")


def choice_group_block(container: Tag, label: Optional[str] = None) -> Optional[BaseBlock]:
    """
    RadioGroup / CheckboxGroup for radios or checkboxes sharing one `name`.

    Returns:
        Block, or None when the container is not a single choice group
    """
    controls = find_controls(container)
    kinds = {input_type(c) for c in controls}
    names = {c.get("name") for c in controls}
    if not controls or len(kinds) != 1 or len(names) != 1:
        return None
    kind = kinds.pop()
    if kind == "radio":
        block_type = BlockType.RADIO_GROUP
    elif kind == "checkbox" and len(controls) > 1:
        block_type = BlockType.CHECKBOX_GROUP
    else:
        return None

    text, starred = clean_label(label)
    fields = {
        "label": text or ("Radio Group" if kind == "radio" else "Checkbox Group"),
        "required": starred or any(c.has_attr("required") for c in controls),
        "options": [clean_label(_choice_label(c))[0] for c in controls],
    }
    name = names.pop()
    if name:
        fields["field_name"] = name
    direction = parse_style(container.get("style")).get("flex-direction")
    inner = container.find(style=re.compile(r"flex-direction", re.IGNORECASE))
    if inner is not None:
        direction = parse_style(inner.get("style")).get("flex-direction", direction)
    if direction == "row":
        fields["layout"] = "horizontal"
    return create_default(block_type, **fields)


def labelled_field(container: Tag) -> Optional[BaseBlock]:
    """
    Recognize a wrapper holding one label and one control and nothing else.

    Text outside the label and the control disqualifies the wrapper so no
    content is dropped.
    """
    controls = find_controls(container)
    if len(controls) != 1:
        return None
    control = controls[0]
    label = container.find("label")
    if label is None:
        return None
    if control.find_parent("label") is label and input_type(control) not in ("checkbox", "radio"):
        # <label>Name <input></label>: label text is the label's own text
        label_text = " ".join(
            s.strip() for s in label.find_all(string=True, recursive=True)
            if s.find_parent(CONTROL_TAGS) is None and s.strip()
        )
    else:
        label_text = collapse_text(label)

    leftover = collapse_text(container)
    for part in (collapse_text(label), collapse_text(control)):
        if part:
            leftover = leftover.replace(part, "", 1)
    if leftover.strip(" *"):
        return None

    return control_block(control, label_text)


def loose_choice_group(container: Tag) -> Optional[BaseBlock]:
    """
    Choice group from a plain wrapper of labels and inputs (no fieldset).

    Text that is not an option label disqualifies the wrapper, except a
    single leading span or label, which becomes the group label.
    """
    group = choice_group_block(container)
    if group is None:
        return None
    sources = [option_source(c) for c in find_controls(container)]
    sources = [s for s in sources if s is not None]
    leftover = unclaimed_content(container, sources)
    if not leftover:
        return group

    first = next((c for c in container.children if not (isinstance(c, str) and not c.strip())), None)
    if (
        isinstance(first, Tag)
        and first.name in ("span", "label")
        and not find_controls(first)
        and not unclaimed_content(container, sources + [first])
    ):
        return choice_group_block(container, collapse_text(first))
    return None
