import logging
import os
import shutil
import tempfile
import time
from datetime import datetime

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound, TemplateSyntaxError, pass_context

from .builder import TreeBuilder
from .errors import ConfigurationError, RenderError
from .i18n import Translations
from .page import DEFAULT_EXCERPT_LENGTH, join_path
from .siteinfo import SiteInfo

CONTENT_DIR = 'pages'
TEMPLATES_DIR = 'templates'
LOCALES_DIR = 'locales'
RESOURCE_DIRS = ('media', 'assets')

# Named templates and the files defining them
TEMPLATE_FILES = {
    'Header': 'header.html',
    'Footer': 'footer.html',
    'PageList': 'page_list.html',
}


class InfoFilter(logging.Filter):
    """Filter to allow only build progress INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Input:",
            "Output:",
            "Loaded site info",
            "categories found",
            "pages found",
            "Skipping draft",
            "Locale:",
            "html files generated",
            "Copying /",
            "Deleting pre-existing output directory",
            "Site build completed in",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


class Tomato:
    """
    Builds a website from an input directory.

    The input directory holds siteinfo.json, the content tree under pages/,
    the templates under templates/ and optional media/ and assets/ directories.
    """

    def __init__(self, input_dir, output_dir=None, log_dir=None, excerpt_length=DEFAULT_EXCERPT_LENGTH):
        self.setup_logging(log_dir)
        self.input_dir, self.output_dir = self.resolve_directories(input_dir, output_dir)
        self.content_dir = os.path.join(self.input_dir, CONTENT_DIR)
        self.templates_dir = os.path.join(self.input_dir, TEMPLATES_DIR)
        self.excerpt_length = excerpt_length

        self.siteinfo = None
        self.translations = None
        self.tree = None
        self.env = None
        self.content_env = None
        self.pages_generated = {}

    def setup_logging(self, log_dir=None):
        """Set up logging configuration."""
        self.logger = logging.getLogger('Tomato')
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            # Console handler with filter
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

            # File handler for all logs
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
                log_filename = datetime.now().strftime('tomato_%Y-%m-%d_%H-%M-%S.log')
                file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
                self.logger.addHandler(file_handler)

    def resolve_directories(self, input_dir, output_dir=None):
        """
        Validate the input directory and pick the output directory.

        The output defaults to "<input>_html". Nothing is written here.
        """
        if not input_dir or not os.path.isdir(input_dir):
            raise ConfigurationError(f"{input_dir} is not a directory.")
        input_dir = os.path.normpath(input_dir)
        if os.path.abspath(input_dir) == os.path.abspath(os.sep):
            raise ConfigurationError("Cannot use root (/) as input directory.")

        if output_dir:
            output_dir = os.path.normpath(output_dir)
        if not output_dir or os.path.abspath(output_dir) == os.path.abspath(input_dir):
            output_dir = input_dir + '_html'
        if os.path.commonpath([os.path.abspath(input_dir), os.path.abspath(output_dir)]) == os.path.abspath(output_dir):
            raise ConfigurationError(f"Output directory {output_dir} contains the input directory {input_dir}.")
        if os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise ConfigurationError(f"{output_dir} already exists and is not a directory.")

        self.logger.info(f"Input: {input_dir}")
        self.logger.info(f"Output: {output_dir}")
        return input_dir, output_dir

    def load(self):
        """Load siteinfo.json and the translations, then build the category tree."""
        if not os.path.isdir(self.content_dir):
            raise ConfigurationError(f"No {CONTENT_DIR}/ directory found in {self.input_dir}")
        if not os.path.isdir(self.templates_dir):
            raise ConfigurationError(f"No {TEMPLATES_DIR}/ directory found in {self.input_dir}")

        self.siteinfo = SiteInfo.load(self.input_dir)
        self.logger.info(f"Loaded site info: {len(self.siteinfo.locales)} locales, "
                         f"{len(self.siteinfo.authors)} authors found.")
        self.translations = Translations.load(os.path.join(self.templates_dir, LOCALES_DIR))

        builder = TreeBuilder(self.siteinfo, self.translations)
        builder.load_categories(self.content_dir)
        self.logger.info(f"{1 + builder.tree.category_count(self.siteinfo.root_locale)} categories found")
        builder.load_pages(self.content_dir)
        for locale in self.siteinfo.locale_codes:
            self.logger.info(f"{locale}: {builder.tree.page_count(locale)} pages found")
        builder.synthesize()
        self.tree = builder.tree
        return self.tree

    def create_environment(self):
        """Set up the Jinja2 environment with the template helpers."""
        env = Environment(loader=FileSystemLoader(self.templates_dir))
        translations = self.translations or Translations()

        @pass_context
        def page_list(context):
            return env.get_template(TEMPLATE_FILES['PageList']).render(context.get_all())

        env.globals.update(
            t=translations.t,
            join=join_path,
            page_list=page_list,
        )
        self.env = env
        # markdown headings may carry {#anchor} attributes
        self.content_env = env.overlay(comment_start_string='{##', comment_end_string='##}')
        return env

    def template_context(self, page, locale):
        return {
            'siteinfo': self.siteinfo,
            'locale': locale,
            'locale_path': self.siteinfo.locale_path(locale),
            'page': page,
            'tree': self.tree,
            'translations': self.translations,
            'excerpt_length': self.excerpt_length,
        }

    def execute_template(self, name, context, stream):
        """Render one of the named templates into stream."""
        try:
            self.env.get_template(TEMPLATE_FILES[name]).stream(context).dump(stream)
        except TemplateNotFound as e:
            raise RenderError(f"Template '{name}' not found: {e}") from e
        except TemplateSyntaxError as e:
            raise RenderError(f"Template error in {e.filename or name}, line {e.lineno}: {e.message}") from e

    def render_content(self, page, context, stream):
        """Render the page's markdown, then execute it as a template so embedded directives run."""
        source = page.content_html(context['locale_path'])
        try:
            self.content_env.from_string(source).stream(context).dump(stream)
        except TemplateSyntaxError as e:
            raise RenderError(f"Template error in content of {page.path()}, line {e.lineno}: {e.message}") from e

    def write_page(self, page, locale, target):
        context = self.template_context(page, locale)
        try:
            with open(target, 'w', encoding='utf-8') as stream:
                self.execute_template('Header', context, stream)
                self.render_content(page, context, stream)
                self.execute_template('Footer', context, stream)
        except TemplateError as e:
            raise RenderError(f"Failed to render {page.path()} ({locale}): {e}") from e
        except (IOError, OSError) as e:
            raise RenderError(f"Failed to write HTML file {target}: {e}") from e
        self.logger.debug(f"Generated HTML: {target}")

    def generate_locale(self, locale, output_root):
        """Write every page of one locale below output_root; return the number of files."""
        locale_path = self.siteinfo.locale_path(locale)
        self.logger.info(f"Locale: {locale}, in {locale_path}")
        count = 0
        for category in self.tree.walk():
            if category.is_empty(locale):
                continue
            segments = [s for s in (locale_path + category.path(locale)).split('/') if s]
            directory = os.path.join(output_root, *segments)
            for page in category.pages(locale):
                # aliased pages are written by the category owning them
                if page.category is not category:
                    continue
                os.makedirs(directory, exist_ok=True)
                self.write_page(page, locale, os.path.join(directory, page.url_basename + '.html'))
                count += 1
        self.pages_generated[locale] = count
        self.logger.info(f"{count} html files generated")
        return count

    def copy_resources(self, output_root):
        """Copy the media/ and assets/ directories of the input to the output root."""
        for name in RESOURCE_DIRS:
            source = os.path.join(self.input_dir, name)
            if not os.path.isdir(source):
                continue
            self.logger.info(f"Copying /{name}")
            try:
                shutil.copytree(source, os.path.join(output_root, name), dirs_exist_ok=True)
            except (IOError, OSError, shutil.Error) as e:
                raise RenderError(f"Failed to copy {source}: {e}") from e

    def publish(self, staging_dir):
        """Replace the output directory by the fully generated staging directory."""
        if os.path.isdir(self.output_dir):
            self.logger.info("Deleting pre-existing output directory")
            shutil.rmtree(self.output_dir)
        os.replace(staging_dir, self.output_dir)

    def build(self):
        """
        Main build process.

        Output is generated in a temporary directory next to the output
        directory, which only replaces the previous output once everything
        succeeded.
        """
        start_time = time.time()
        if self.tree is None:
            self.load()
        self.create_environment()

        parent_dir = os.path.dirname(os.path.abspath(self.output_dir))
        os.makedirs(parent_dir, exist_ok=True)
        staging_dir = tempfile.mkdtemp(prefix='.tomato-', dir=parent_dir)
        try:
            os.chmod(staging_dir, 0o755)
            for locale in self.siteinfo.locale_codes:
                self.generate_locale(locale, staging_dir)
            self.copy_resources(staging_dir)
            self.publish(staging_dir)
        except BaseException:
            shutil.rmtree(staging_dir, ignore_errors=True)
            raise

        self.logger.info(f"Site build completed in {time.time() - start_time:.6f} seconds.")
        return self.pages_generated

    @property
    def total_generated(self):
        return sum(self.pages_generated.values())


