"""
Clinic Finder — Gradio Application.

A conversational clinic finder with:
  - Intent recognition (Gemini)
  - Three-step "find clinic" dialog: location → nearest clinics → pick one
  - Pre-set clinic memory (MongoDB, or in-memory fallback)
  - Live dialog status panel
"""

import gradio as gr
from chatbot.catalog import ClinicCatalog
from chatbot.conversation_manager import ConversationManager, create_initial_context
from chatbot.errors import CatalogUnavailable
from chatbot.llm_engine import LLMEngine
from database.mongo_client import MongoDBClient
import config

# ── Custom CSS ─────────────────────────────────────────────────────────────

CUSTOM_CSS = """
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap');

.gradio-container {
    font-family: 'Inter', sans-serif !important;
    max-width: 1300px !important;
}

.header-banner {
    background: linear-gradient(135deg, #1e3a8a 0%, #2563eb 55%, #60a5fa 100%);
    padding: 24px 32px;
    border-radius: 14px;
    margin-bottom: 18px;
    color: white;
    box-shadow: 0 8px 28px rgba(30, 58, 138, 0.25);
}

.header-banner h1 {
    margin: 0 0 4px 0;
    font-size: 26px;
    font-weight: 700;
}

.header-banner p {
    margin: 0;
    font-size: 14px;
    opacity: 0.9;
}

.status-panel {
    background: #f8fafc;
    border: 1px solid #bfdbfe;
    border-radius: 12px;
    padding: 18px;
}

.status-panel h3 {
    color: #1e3a8a;
    font-size: 12px;
    text-transform: uppercase;
    letter-spacing: 1px;
    margin-bottom: 6px;
    font-weight: 600;
}

.send-btn {
    background: linear-gradient(135deg, #1e3a8a, #2563eb) !important;
    border: none !important;
    color: white !important;
    font-weight: 600 !important;
    border-radius: 10px !important;
    min-height: 45px !important;
}

.reset-btn {
    background: white !important;
    border: 2px solid #e5e7eb !important;
    color: #6b7280 !important;
    border-radius: 10px !important;
}

.footer-note {
    text-align: center;
    font-size: 12px;
    color: #9ca3af;
    margin-top: 10px;
}
"""

EMPTY_STATUS = (
    "👋 Ready",
    "*No location yet*",
    "*No clinics ranked yet*",
    "*No clinic selected*",
)


# ── Initialize Core Components ─────────────────────────────────────────────

def initialize_components():
    """Initialize the LLM engine, database client and clinic catalog."""
    try:
        llm = LLMEngine()
    except ValueError as e:
        print(f"[INIT ERROR] {e}")
        llm = None

    try:
        catalog = ClinicCatalog()
    except CatalogUnavailable as e:
        print(f"[INIT ERROR] {e}")
        catalog = None

    db = MongoDBClient()
    return llm, db, catalog


# ── Build Gradio App ───────────────────────────────────────────────────────

def create_app():
    """Build and return the Gradio application."""

    llm_engine, db_client, catalog = initialize_components()

    if llm_engine and catalog:
        manager = ConversationManager(llm_engine, db_client, catalog)
    else:
        manager = None

    # ── Event Handlers ─────────────────────────────────────────────────

    def respond(message, chat_history, context):
        """Process user message and return updated state."""
        if not message or not message.strip():
            return chat_history, context, *EMPTY_STATUS, ""

        if manager is None:
            error_msg = (
                "⚠️ **Setup Required**: the bot could not start.\n\n"
                "1. Set `GOOGLE_API_KEY` in your `.env` file "
                "([Google AI Studio](https://aistudio.google.com/apikey))\n"
                f"2. Make sure the clinic catalog exists at `{config.CLINIC_CATALOG_PATH}`\n"
                "3. Restart the application"
            )
            chat_history.append({"role": "user", "content": message})
            chat_history.append({"role": "assistant", "content": error_msg})
            return chat_history, context, "⚠️ Setup Required", "", "", "", ""

        bot_response, context = manager.process_message(message, context)

        chat_history.append({"role": "user", "content": message})
        chat_history.append({"role": "assistant", "content": bot_response})

        status = manager.get_status_displays(context)

        return (
            chat_history,
            context,
            status["status"],
            status["location"],
            status["clinics"],
            status["selected"],
            "",  # Clear input textbox
        )

    def reset_conversation(context):
        """Reset the conversation, keeping the same user identity."""
        ctx = create_initial_context(context.get("user_id") if context else None)
        greeting = manager.get_greeting() if manager else "⚠️ Please configure the app."
        history = [{"role": "assistant", "content": greeting}]
        return (history, ctx, *EMPTY_STATUS)

    def reload_catalog():
        """Reload the clinic list from disk."""
        if catalog is None:
            return "⚠️ No catalog loaded"
        try:
            catalog.refresh()
        except CatalogUnavailable as e:
            print(f"[Catalog] ❌ Reload failed: {e}")
            return f"⚠️ Reload failed — still serving {len(catalog)} clinics"
        return f"🏥 {len(catalog)} clinics loaded"

    # ── Build UI ───────────────────────────────────────────────────────

    with gr.Blocks(
        css=CUSTOM_CSS,
        title="ClinicFinder — Find a Clinic Near You",
        theme=gr.themes.Soft(
            primary_hue=gr.themes.colors.blue,
            secondary_hue=gr.themes.colors.sky,
            neutral_hue=gr.themes.colors.gray,
            font=gr.themes.GoogleFont("Inter"),
        ),
    ) as app:

        conv_context = gr.State(create_initial_context)

        gr.HTML("""
        <div class="header-banner">
            <h1>🏥 ClinicFinder</h1>
            <p>Tell me where you are • See the nearest clinics • Save your clinic</p>
        </div>
        """)

        with gr.Row():

            # ── Main Chat Column ───────────────────────────────────────
            with gr.Column(scale=3):
                chatbot = gr.Chatbot(
                    value=[{
                        "role": "assistant",
                        "content": manager.get_greeting() if manager else "⚠️ Please configure the app in `.env`.",
                    }],
                    height=520,
                )

                with gr.Row():
                    msg = gr.Textbox(
                        placeholder="Ask me to find a clinic, or send longitude|latitude...",
                        show_label=False,
                        scale=5,
                        container=False,
                        autofocus=True,
                    )
                    send_btn = gr.Button(
                        "Send ➤",
                        variant="primary",
                        scale=1,
                        elem_classes=["send-btn"],
                        min_width=100,
                    )

                with gr.Row():
                    clear_btn = gr.Button(
                        "🔄 New Conversation",
                        variant="secondary",
                        elem_classes=["reset-btn"],
                        size="sm",
                    )
                    reload_btn = gr.Button(
                        "♻️ Reload Clinics",
                        variant="secondary",
                        elem_classes=["reset-btn"],
                        size="sm",
                    )

                gr.Examples(
                    examples=[
                        "Find me a clinic",
                        "Set my clinic",
                        "-118.25|34.01",
                        "-122.41|37.77",
                    ],
                    inputs=msg,
                    label="💡 Try these examples:",
                    examples_per_page=4,
                )

            # ── Sidebar: Dialog Status Panel ───────────────────────────
            with gr.Column(scale=1, min_width=280):
                with gr.Group(elem_classes=["status-panel"]):
                    gr.HTML("<h3>📊 Phase</h3>")
                    status_display = gr.Markdown(EMPTY_STATUS[0])

                    gr.HTML("<h3>📍 Your Location</h3>")
                    location_display = gr.Markdown(EMPTY_STATUS[1])

                    gr.HTML("<h3>🏥 Nearest Clinics</h3>")
                    clinics_display = gr.Markdown(EMPTY_STATUS[2])

                    gr.HTML("<h3>✅ Selected Clinic</h3>")
                    selected_display = gr.Markdown(EMPTY_STATUS[3])

                    gr.HTML("<h3>📚 Catalog</h3>")
                    catalog_display = gr.Markdown(
                        f"🏥 {len(catalog)} clinics loaded" if catalog else "⚠️ No catalog loaded"
                    )

        gr.HTML("""
        <div class="footer-note">
            ⚠️ Distances are straight-line estimates. Always call the clinic to confirm
            hours and availability. In emergencies, call <strong>911</strong>.
        </div>
        """)

        # ── Event Bindings ─────────────────────────────────────────────
        outputs = [
            chatbot, conv_context,
            status_display, location_display,
            clinics_display, selected_display,
            msg,
        ]

        msg.submit(respond, inputs=[msg, chatbot, conv_context], outputs=outputs)
        send_btn.click(respond, inputs=[msg, chatbot, conv_context], outputs=outputs)

        clear_btn.click(
            reset_conversation,
            inputs=[conv_context],
            outputs=[
                chatbot, conv_context,
                status_display, location_display,
                clinics_display, selected_display,
            ],
        )

        reload_btn.click(reload_catalog, inputs=None, outputs=[catalog_display])

    return app


# ── Entry Point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app = create_app()
    app.launch(
        server_name="0.0.0.0",
        server_port=8000,
        share=False,
        show_error=True,
    )
