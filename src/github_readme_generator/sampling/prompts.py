SYSTEM_PROMPT = """
You are an expert software documentation writer who specializes in creating detailed, accurate, and practical
documentation. Ensure all code blocks are properly formatted with language specifiers and triple backticks, and
maintain consistent markdown formatting throughout the document.
""".strip()

DOCUMENTATION_PROMPT = """
Generate a comprehensive README.md for the GitHub repository following this exact structure and formatting rules:

1. Repository Title (ONLY ONCE at the top)
   - Only include "# " followed by the repository name
   - Do not add any emojis to the title

2. Project Overview Section (titled "## 📖 Project Overview")
   - Write 2-3 detailed sentences explaining what the project does
   - Include its purpose, main functionality, and target users

3. Technical Architecture Section (titled "## 🏗️ Technical Architecture")
   - Write 1-2 sentences describing the overall technical structure
   - Explain how the main components interact
   - Mention key technologies used

4. File Documentation Section (titled "## 📁 File Documentation")
   - For each main file:
     * Use "### 📄 filename" format for file names
     * Write 1-2 specific sentences about the file's purpose and role

5. Installation & Usage Section
   - Title as "## 🔧 Installation"
   - Format installation commands in code blocks using triple backticks with bash:
     ```bash
     command here
     ```
   - Title usage section as "## 🚀 Usage"
   - Format code examples in appropriate language blocks:
     ```python
     code here
     ```

6. Requirements Section (titled "## 📋 Requirements")
   - List dependencies with version numbers
   - Include system requirements
   - Format installation commands in code blocks

7. License Section (titled "## 📝 License")
   - State the project's license

Formatting Rules:
- Never duplicate the title
- Always use triple backticks with language specifiers for code blocks
- Keep proper markdown heading hierarchy (# for title, ## for sections, ### for subsections)
- Include blank lines before and after headings and code blocks
- Use bullet points for lists
- Format inline code references with single backticks
- Maintain consistent spacing between sections
""".strip()


def render_repository_details(owner_repo: str, context: str) -> str:
    return f"""
Repository: {owner_repo}

Repository Content:
{context}"""


def render_user_prompt(template: str, owner_repo: str, context: str) -> str:
    """Combine the documentation template with the repository being documented."""

    return f"{template}\n\nRepository Details:\n{render_repository_details(owner_repo=owner_repo, context=context)}"
