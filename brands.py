from dataclasses import dataclass, field
from typing import Dict, List

from script_templates import KIVY_SCRIPT, TKINTER_SCRIPT


@dataclass(frozen=True)
class BrandProfile:
    """User-facing strings and defaults for one edition of the converter."""

    key: str
    title: str
    tagline: str
    default_quality: float
    download_prefix: str
    messages: Dict[str, str]
    script: str
    script_requires: List[str] = field(default_factory=list)
    script_intro: str = ""
    docs_label: str = ""
    docs_url: str = ""

    def download_name(self, timestamp_ms: int) -> str:
        return f"{self.download_prefix}_{timestamp_ms}.pdf"

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'title': self.title,
            'tagline': self.tagline,
            'messages': dict(self.messages),
            'script_intro': self.script_intro,
            'defaults': {
                'pageSize': 'A4',
                'passwordProtected': False,
                'quality': self.default_quality,
            },
        }


PYPDF_PRO = BrandProfile(
    key='pypdf-pro',
    title='PyPDF Pro',
    tagline='Architect Suite',
    default_quality=0.8,
    download_prefix='combined_images',
    messages={
        'no_images': 'Please add at least one image.',
        'no_password': 'Please enter a password for protection.',
        'success': 'PDF generated and download started successfully!',
        'error_prefix': 'Failed to generate PDF: ',
    },
    script=TKINTER_SCRIPT,
    script_requires=['img2pdf', 'pikepdf'],
    script_intro='Need to automate this on your local machine? Use the Tkinter template built on img2pdf.',
    docs_label='img2pdf on PyPI',
    docs_url='https://pypi.org/project/img2pdf/',
)

MEENAXPDF = BrandProfile(
    key='meenaxpdf',
    title='MEENAXPDF',
    tagline='MEENAX Private Limited',
    default_quality=0.9,
    download_prefix='MEENAXPDF_EXPORT',
    messages={
        'no_images': 'Please select images for your MEENAXPDF project.',
        'no_password': 'Set a master key to enable encryption.',
        'success': 'MEENAXPDF Export Successful!',
        'error_prefix': 'MEENAXPDF Engine Error: ',
    },
    script=KIVY_SCRIPT,
    script_requires=['kivy', 'img2pdf', 'PyPDF2'],
    script_intro='Take MEENAXPDF offline with the Kivy desktop and mobile template.',
    docs_label='Kivy Documentation',
    docs_url='https://kivy.org/doc/stable/gettingstarted/installation.html',
)

BRANDS = {b.key: b for b in (PYPDF_PRO, MEENAXPDF)}


def get_brand(key: str) -> BrandProfile:
    try:
        return BRANDS[key]
    except KeyError:
        raise KeyError(f"Unknown brand '{key}', expected one of: {', '.join(sorted(BRANDS))}") from None
