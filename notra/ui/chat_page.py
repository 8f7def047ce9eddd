"""NiceGUI chat interface streaming plain-text replies from the bridge."""

from nicegui import ui

from notra.bridge.providers import PROVIDER_LABELS
from notra.models.schemas import ChatMessage, ProviderKind, Role
from notra.ui.session import BridgeClient, ChatSession, assistant_emoji

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: linear-gradient(180deg, #f0f9ff 0%, #eff6ff 50%, #e0e7ff 100%); }

    .app-container {
        background: rgba(255, 255, 255, 0.85);
        border-radius: 16px;
        box-shadow: 0 2px 12px rgba(30, 64, 175, 0.12);
        overflow: hidden;
    }

    .logo { background: linear-gradient(135deg, #3b82f6 0%, #6366f1 50%, #22d3ee 100%); }

    .message-user {
        background: #2563eb;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: white;
        color: #0f172a;
        border: 1px solid #e2e8f0;
        border-radius: 18px 18px 18px 4px;
    }

    .message-assistant p { margin: 0.25rem 0; }
    .message-assistant pre { margin: 0.5rem 0; font-size: 0.75rem; }
    .message-assistant a { color: #4f46e5; }

    .input-box {
        background: #f8fafc;
        border: 1px solid #e2e8f0;
        border-radius: 12px;
        transition: border-color 0.2s;
    }
    .input-box:focus-within { border-color: #3b82f6; }
</style>
"""


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession()
    client = BridgeClient()

    messages_container: ui.column
    input_field: ui.textarea

    def render_message(index: int, msg: ChatMessage) -> None:
        is_user = msg.role is Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align} gap-3 items-start"):
            if not is_user:
                ui.label(assistant_emoji(msg.content, index)).classes("text-2xl")
            with ui.element("div").classes(f"max-w-[75%] px-4 py-3 {bubble}"):
                if is_user:
                    ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                elif msg.content:
                    ui.markdown(msg.content).classes("text-sm leading-relaxed")
                else:
                    ui.spinner("dots", size="md").classes("text-indigo-500")

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            for index, msg in enumerate(session.messages):
                render_message(index, msg)
        scroll_area.scroll_to(percent=1.0)

    def send_message() -> None:
        text = input_field.value
        if not text.strip():
            return
        input_field.value = ""
        # Replaces any reply still streaming
        session.submit(text, client.stream_reply, refresh_messages)

    def new_chat() -> None:
        session.reset()
        refresh_messages()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-4xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full px-5 py-3 items-center justify-between border-b"):
            with ui.row().classes("items-center gap-3"):
                with ui.element("div").classes(
                    "logo w-9 h-9 rounded-2xl flex items-center justify-center"
                ):
                    ui.label("N").classes("text-sm font-semibold text-white")
                with ui.column().classes("gap-0"):
                    ui.label("Notra").classes("text-sm font-semibold text-slate-900")
                    ui.label("Your Intelligent Learning & Writing Companion").classes(
                        "text-xs text-slate-500"
                    )
            with ui.row().classes("items-center gap-2"):
                ui.toggle(
                    {kind.value: PROVIDER_LABELS[kind] for kind in ProviderKind},
                    value=session.provider,
                ).bind_value(session, "provider").props("dense rounded no-caps size=sm")
                ui.button(icon="add", on_click=new_chat).props("flat round dense")

        # Messages
        with ui.scroll_area().classes("flex-grow w-full") as scroll_area:
            messages_container = ui.column().classes("w-full gap-4 p-5")

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end border-t"):
            with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                input_field = (
                    ui.textarea(placeholder="Ask Notra anything...")
                    .props("autogrow borderless dense rows=1")
                    .classes("w-full")
                    .on("keydown.enter.prevent", send_message)
                )
            ui.button(icon="send", on_click=send_message).props("round unelevated color=primary")

    refresh_messages()
    ui.context.client.on_disconnect(session.cancel)


def main() -> None:
    ui.run(title="Notra", port=8080, reload=False)


if __name__ == "__main__":
    main()
