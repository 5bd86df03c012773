from html import escape

from webtocase.backend.models import FieldKind, FieldSpec, FormDescription

DEFAULT_SUCCESS_MESSAGE = "Your request has been submitted successfully."

INPUT_TYPES: dict[FieldKind, str] = {
    FieldKind.TEXT: "text",
    FieldKind.EMAIL: "email",
    FieldKind.PHONE: "tel",
}


def render_field(field: FieldSpec) -> str:
    input_id = f"wtcField_{escape(field.name)}"
    label = escape(field.label)
    required = ' data-required="true"' if field.required else ""
    mark = '<span class="wtc-required">*</span>' if field.required else ""
    attrs = f'id="{input_id}" name="{escape(field.name)}"{required} data-label="{label}"'

    parts = ['<div class="wtc-field">', f'<label for="{input_id}">{label}{mark}</label>']
    if field.kind == FieldKind.TEXTAREA:
        parts.append(f'<textarea {attrs} class="wtc-input wtc-textarea"></textarea>')
    else:
        parts.append(f'<input type="{INPUT_TYPES[field.kind]}" {attrs} class="wtc-input" />')
    parts.append("</div>")
    return "".join(parts)


def render_form(description: FormDescription) -> str:
    """Render the self-hosted form markup. All configured text is escaped."""
    parts = ['<div class="wtc-container">']
    if description.title:
        parts.append(f'<h2 class="wtc-title">{escape(description.title)}</h2>')
    if description.description:
        parts.append(f'<p class="wtc-description">{escape(description.description)}</p>')

    parts.append('<form class="wtc-form" id="wtcForm">')
    parts.extend(render_field(field) for field in description.fields)

    if description.file_upload_enabled:
        parts.append(
            '<div class="wtc-field">'
            '<label for="wtcFile">Attachment</label>'
            '<input type="file" id="wtcFile" class="wtc-file-input" />'
            f'<span class="wtc-help">Max {description.max_file_size_mb:g}MB. '
            "Images are automatically optimized.</span>"
            "</div>"
        )
    if description.captcha_enabled:
        parts.append(
            '<div class="wtc-field wtc-captcha-placeholder">'
            '<div id="wtcCaptchaContainer"></div>'
            '<span class="wtc-captcha-error" id="wtcCaptchaError" style="display:none;">'
            "Please complete the verification.</span>"
            "</div>"
        )
    parts.append('<div class="wtc-error-message" id="wtcError" style="display:none;"></div>')
    parts.append('<button type="submit" class="wtc-submit" id="wtcSubmit">Submit</button>')
    parts.append("</form>")

    success = escape(description.success_message or DEFAULT_SUCCESS_MESSAGE)
    parts.append(
        '<div class="wtc-success" id="wtcSuccess" style="display:none;">'
        f"<p>{success}</p>"
        '<p class="wtc-case-number">Reference: <span id="wtcCaseNumber"></span></p>'
        "</div>"
    )
    parts.append("</div>")
    return "".join(parts)
