"""
Test basic project structure and imports
"""
import os


def test_project_structure():
    """Test that all required directories and files exist"""

    # Check main directories
    assert os.path.exists("resolve"), "resolve directory should exist"
    assert os.path.exists("tests"), "tests directory should exist"

    # Check package subdirectories
    assert os.path.exists("resolve/models"), "resolve/models directory should exist"
    assert os.path.exists("resolve/realtime"), "resolve/realtime directory should exist"
    assert os.path.exists("resolve/routes"), "resolve/routes directory should exist"
    assert os.path.exists("resolve/services"), "resolve/services directory should exist"

    # Check key files
    assert os.path.exists("resolve/main.py"), "resolve/main.py should exist"
    assert os.path.exists("resolve/config.py"), "resolve/config.py should exist"
    assert os.path.exists("resolve/logging_config.py"), "resolve/logging_config.py should exist"
    assert os.path.exists("pyproject.toml"), "pyproject.toml should exist"
    assert os.path.exists("requirements.txt"), "requirements.txt should exist"
    assert os.path.exists(".env.example"), ".env.example should exist"


def test_requirements_file():
    """Test that requirements.txt contains expected dependencies"""
    with open("requirements.txt", "r") as f:
        content = f.read()

    # Check for key dependencies
    assert "fastapi" in content, "FastAPI should be in requirements"
    assert "uvicorn" in content, "Uvicorn should be in requirements"
    assert "sqlmodel" in content, "SQLModel should be in requirements"
    assert "httpx" in content, "httpx should be in requirements"
    assert "python-dotenv" in content, "python-dotenv should be in requirements"
    assert "python-json-logger" in content, "python-json-logger should be in requirements"
    assert "openai" in content, "openai should be in requirements"
    assert "supabase" in content, "supabase should be in requirements"


def test_env_example_lists_settings():
    """Test that .env.example documents the backend and gateway settings"""
    with open(".env.example", "r") as f:
        content = f.read()

    for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SERVICE_KEY", "AI_GATEWAY_API_KEY"):
        assert name in content, f"{name} should be in .env.example"
