"""Term lists used by the post classifier.

Each list holds regular-expression alternatives. The classifier joins them
into one case-insensitive pattern wrapped in word boundaries.
"""

# Programming, hardware and maker vocabulary.
TOPIC_TERMS = (
    r"Rust",
    r"C\+\+",
    r"cpp",
    r"js",
    r"c#",
    r"swift",
    r"dotnet",
    r"php",
    r"Python",
    r"JavaScript",
    r"RustLang",
    r"Embedded dev",
    r"Microcontroller",
    r"IoT",
    r"Arduino",
    r"RaspberryPi",
    r"Programming",
    r"Software Developer",
    r"Software Developers",
    r"Dev",
    r"Hardware",
    r"Compiler",
    r"OpenSource",
    r"GitHub",
    r"Linux",
    r"Kernel",
    r"RTOS",
    r"ESP32",
    r"Pico",
    r"rp\s?2040",
    r"rp\s?2350",
    r"Micropython",
    r"VS Code",
    r"JetBrains",
    r"spi",
    r"i2c",
    r"soldering",
    r"waveshare",
    r"maker",
    r"adafruit",
)

# Signals that the post is a write-up rather than a one-line remark.
NARRATIVE_TERMS = (
    r"blog",
    r"post",
    r"article",
    r"thread",
    r"write-up",
    r"guide",
    r"tutorial",
    r"how-to",
    r"explainer",
    r"deep dive",
    r"🧵",
    r"working",
    r"threads",
    r"project",
)

# Topics this feed never carries.
DENYLIST_TERMS = (
    r"musk",
    r"elon",
    r"trump",
    r"united states",
    r"flordia",
    r"texas",
    r"doge",
    r"government",
    r"president",
    r"potus",
    r"maga",
    r"vance",
)
