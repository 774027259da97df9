import pytest

from project_synth.config import Settings
from project_synth.store import ProjectStore


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def empty_store():
    return ProjectStore.empty()


@pytest.fixture
def static_site_store():
    """A plain HTML/CSS/JS site with a full document shell."""
    return ProjectStore.from_contents(
        {
            "index.html": (
                "<!DOCTYPE html>\n"
                "<html>\n"
                "<head>\n"
                "<title>Demo</title>\n"
                '<link rel="stylesheet" href="styles.css">\n'
                '<link rel="preconnect" href="https://fonts.googleapis.com">\n'
                "</head>\n"
                "<body>\n"
                '<h1 class="title">Hello</h1>\n'
                '<script src="app.js"></script>\n'
                "</body>\n"
                "</html>"
            ),
            "styles.css": "h1 { color: rebeccapurple; }",
            "app.js": "document.querySelector('h1').textContent = 'Hi';",
        }
    )


@pytest.fixture
def react_store():
    """A small component project split across folders."""
    return ProjectStore.from_contents(
        {
            "src/App.jsx": (
                "import React, { useState } from 'react';\n"
                "import Header from './components/Header';\n"
                "import './App.css';\n"
                "\n"
                "export default function App() {\n"
                "  const [count, setCount] = useState(0);\n"
                "  return <div><Header /><button onClick={() => setCount(count + 1)}>{count}</button></div>;\n"
                "}\n"
            ),
            "src/components/Header.jsx": (
                "import React from 'react';\n"
                "\n"
                "const Header = () => <h1 className=\"text-xl font-bold\">Counter</h1>;\n"
                "\n"
                "export default Header;\n"
            ),
            "src/App.css": "button { padding: 4px; }",
        }
    )


@pytest.fixture
def chat_response_new_files():
    return (
        "Here is your project.\n\n"
        "[NEW_FILE: index.html]\n"
        "```html\n"
        "<!DOCTYPE html>\n<html><head></head><body><p>Hi</p></body></html>\n"
        "```\n\n"
        "[NEW_FILE: styles.css]\n"
        "```css\n"
        "p { color: red; }\n"
        "```\n\n"
        "Let me know if you want changes."
    )
