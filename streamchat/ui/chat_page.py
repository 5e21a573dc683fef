"""NiceGUI chat interface driven by the conversation controller."""

from nicegui import ui

from streamchat.chat.controller import ConversationController
from streamchat.chat.transcript import Snapshot
from streamchat.models.schemas import Message, Notification, Role, Severity

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }

    .row-user { background: #ffffff; }
    .row-assistant { background: #f3f4f6; }

    .avatar-user { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }
    .avatar-assistant { background: #6b7280; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #667eea;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
        transition: border-color 0.2s;
    }
    .input-box:focus-within { border-color: #667eea; }

    .send-btn { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%) !important; }
</style>
"""

NOTIFY_TYPES = {
    Severity.INFO: "info",
    Severity.WARNING: "warning",
    Severity.ERROR: "negative",
}


def show_notification(notification: Notification) -> None:
    ui.notify(
        f"{notification.title}: {notification.description}",
        type=NOTIFY_TYPES[notification.severity],
    )


async def send_input(controller: ConversationController, field) -> None:
    """Send the text typed into ``field`` and empty it. Blank input is ignored."""
    text = field.value or ""
    if not text.strip():
        return
    field.value = ""
    await controller.send_message(text)


async def send_on_enter(controller: ConversationController, field) -> None:
    """Enter only sends; while a reply is in flight it does nothing."""
    if controller.is_busy:
        return
    await send_input(controller, field)


@ui.page("/")
def chat_page() -> None:
    """Main chat page. Each client gets its own controller."""
    ui.add_head_html(CUSTOM_CSS)
    controller = ConversationController(on_notification=show_notification)
    ui.context.client.on_disconnect(controller.aclose)

    # message id -> (record last rendered, markdown element, typing indicator)
    rendered: dict[str, tuple[Message, ui.markdown, ui.row | None]] = {}

    messages_container: ui.column
    scroll_area: ui.scroll_area
    input_field: ui.textarea
    send_btn: ui.button
    clear_btn: ui.button

    def render_avatar(is_user: bool) -> None:
        css = "avatar-user" if is_user else "avatar-assistant"
        icon = "person" if is_user else "smart_toy"
        avatar_classes = f"w-8 h-8 shrink-0 rounded-lg flex items-center justify-center {css}"
        with ui.element("div").classes(avatar_classes):
            ui.icon(icon).classes("text-white text-lg")

    def render_typing_indicator() -> ui.row:
        with ui.row().classes("gap-1 py-2") as row:
            for _ in range(3):
                ui.element("div").classes("typing-dot")
        return row

    def render_message(msg: Message) -> None:
        is_user = msg.role == Role.USER
        row_css = "row-user" if is_user else "row-assistant"

        with ui.row().classes(f"w-full gap-4 p-5 no-wrap {row_css}"):
            render_avatar(is_user)
            with ui.column().classes("flex-1 gap-1"):
                with ui.row().classes("items-baseline gap-2"):
                    ui.label("You" if is_user else "AI Assistant").classes(
                        "text-sm font-medium"
                    )
                    ui.label(msg.created_at.strftime("%I:%M %p")).classes(
                        "text-[10px] text-gray-400"
                    )
                typing = None
                if not is_user:
                    typing = render_typing_indicator()
                    typing.set_visibility(msg.streaming and not msg.content)
                content = ui.markdown(msg.content).classes("text-sm leading-relaxed w-full")
        rendered[msg.id] = (msg, content, typing)

    def refresh_messages(snapshot: Snapshot) -> None:
        rendered.clear()
        messages_container.clear()
        with messages_container:
            if not snapshot:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("auto_awesome").classes("text-5xl text-gray-300")
                    ui.label("Start a Conversation").classes("text-lg text-gray-500")
                    ui.label("Type your message below to get started").classes(
                        "text-sm text-gray-400"
                    )
            else:
                for msg in snapshot:
                    render_message(msg)

    def update_messages(snapshot: Snapshot) -> None:
        # Only a record's content or streaming flag changed: patch in place
        for msg in snapshot:
            previous, content, typing = rendered[msg.id]
            if previous is msg:
                continue
            content.set_content(msg.content)
            if typing is not None:
                typing.set_visibility(msg.streaming and not msg.content)
            rendered[msg.id] = (msg, content, typing)

    def update_controls() -> None:
        busy = controller.is_busy or controller.is_streaming
        send_btn.props(f"icon={'stop' if busy else 'send'}")
        clear_btn.set_visibility(bool(controller.messages))

    def on_snapshot(snapshot: Snapshot) -> None:
        if [m.id for m in snapshot] == list(rendered):
            update_messages(snapshot)
        else:
            refresh_messages(snapshot)
        update_controls()
        scroll_area.scroll_to(percent=1.0)

    async def submit() -> None:
        if controller.is_busy:
            controller.stop_generation()
            return
        await send_input(controller, input_field)
        update_controls()

    async def submit_on_enter() -> None:
        await send_on_enter(controller, input_field)
        update_controls()

    def clear_chat() -> None:
        controller.clear_messages()

    controller.subscribe(on_snapshot)

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-4xl mx-auto app-container gap-0").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("auto_awesome").classes("text-white text-3xl")
                with ui.column().classes("gap-0"):
                    ui.label("AI Chatbot").classes("text-lg font-semibold text-white")
                    ui.label("Powered by your custom API").classes("text-xs text-white/70")
            clear_btn = ui.button("Clear Chat", icon="delete", on_click=clear_chat).props(
                "flat color=white"
            )

        # Messages
        with ui.scroll_area().classes("flex-grow w-full bg-gray-50") as scroll_area:
            messages_container = ui.column().classes("w-full gap-0")

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t no-wrap"):
            with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                input_field = (
                    ui.textarea(placeholder="Type your message here...")
                    .props("autogrow borderless dense rows=2")
                    .classes("w-full")
                    .on("keydown.enter.exact.prevent", submit_on_enter)
                )
            send_btn = (
                ui.button(icon="send", on_click=submit)
                .props("round unelevated")
                .classes("send-btn")
            )

    refresh_messages(controller.messages)
    update_controls()


def main() -> None:
    ui.run(title="AI Chatbot", port=8080, reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
