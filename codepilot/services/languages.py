"""Starter templates and download extensions per editor language"""

from __future__ import annotations

from codepilot.models.editor import Language

TEMPLATES: dict[Language, str] = {
    Language.JAVASCRIPT: '// JavaScript code here\nfunction example() {\n  return "Hello, World!";\n}',
    Language.PYTHON: '# Python code here\ndef example():\n    return "Hello, World!"',
    Language.JAVA: (
        "// Java code here\npublic class Example {\n"
        "    public static void main(String[] args) {\n"
        '        System.out.println("Hello, World!");\n    }\n}'
    ),
    Language.CPP: (
        "// C++ code here\n#include <iostream>\n\nint main() {\n"
        '    std::cout << "Hello, World!" << std::endl;\n    return 0;\n}'
    ),
    Language.CSHARP: (
        "// C# code here\nusing System;\n\nclass Program {\n"
        '    static void Main() {\n        Console.WriteLine("Hello, World!");\n    }\n}'
    ),
    Language.PHP: '<?php\n// PHP code here\nfunction example() {\n    return "Hello, World!";\n}\n?>',
    Language.RUBY: '# Ruby code here\ndef example\n  "Hello, World!"\nend',
    Language.SWIFT: '// Swift code here\nfunc example() -> String {\n    return "Hello, World!"\n}',
    Language.GO: '// Go code here\npackage main\n\nimport "fmt"\n\nfunc main() {\n    fmt.Println("Hello, World!")\n}',
    Language.RUST: '// Rust code here\nfn main() {\n    println!("Hello, World!");\n}',
}

FILE_EXTENSIONS: dict[Language, str] = {
    Language.JAVASCRIPT: "js",
    Language.PYTHON: "py",
    Language.JAVA: "java",
    Language.CPP: "cpp",
    Language.CSHARP: "cs",
    Language.PHP: "php",
    Language.RUBY: "rb",
    Language.SWIFT: "swift",
    Language.GO: "go",
    Language.RUST: "rs",
}


def template_for(language: Language) -> str:
    return TEMPLATES.get(language, TEMPLATES[Language.JAVASCRIPT])


def download_name(language: Language) -> str:
    """File name offered when the buffer is downloaded"""
    return f"code.{FILE_EXTENSIONS.get(language, 'txt')}"


def parse_language(value: str | None) -> Language | None:
    """Map a stored language id back to the enum, None when unknown"""
    try:
        return Language(value)
    except ValueError:
        return None
