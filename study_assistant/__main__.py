from study_assistant.ui import run_app

run_app()
