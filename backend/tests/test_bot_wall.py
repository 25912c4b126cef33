"""Tests for anti-bot challenge page detection."""

from comicsource.scrapers.utils.bot_wall import detect_bot_wall

from conftest import CHALLENGE_PAGE


class TestChallengePages:
    """Pages that must be classified as bot walls."""

    def test_just_a_moment_with_checking_browser_heading(self):
        html = """
        <html>
          <head><title>Just a moment...</title></head>
          <body><h1>Checking your browser</h1></body>
        </html>
        """
        assert detect_bot_wall(html) is True

    def test_full_challenge_interstitial(self):
        assert detect_bot_wall(CHALLENGE_PAGE) is True

    def test_ddos_protection_title(self):
        html = """
        <html>
          <head><title>DDoS protection by Cloudflare</title></head>
          <body><h1>Please enable JavaScript and cookies to continue</h1></body>
        </html>
        """
        assert detect_bot_wall(html) is True

    def test_attention_required_with_challenge_platform(self):
        html = """
        <html>
          <body>
            <h1>Attention Required! | Cloudflare</h1>
            <div class="challenge-platform">
              <p>Please complete the security check to access the website</p>
            </div>
          </body>
        </html>
        """
        assert detect_bot_wall(html) is True

    def test_challenge_markers_without_headline(self):
        html = """
        <html><body>
          <script src="/cdn-cgi/challenge-platform/h/b/orchestrate/jsch/v1"></script>
          <p>Enable JavaScript and cookies to continue</p>
        </body></html>
        """
        assert detect_bot_wall(html) is True


class TestOrdinaryPages:
    """Pages that must not be flagged."""

    def test_normal_chapter_list(self):
        html = """
        <html>
          <head><title>Solo Leveling - Chapter 1</title></head>
          <body>
            <h1>Solo Leveling</h1>
            <div class="chapter-list"><a href="/chapter-1">Chapter 1</a></div>
          </body>
        </html>
        """
        assert detect_bot_wall(html) is False

    def test_passing_mention_of_protection(self):
        html = """
        <html>
          <head><title>My Website</title></head>
          <body>
            <h1>Welcome</h1>
            <p>This site is protected by various services, but is currently accessible.</p>
            <div class="content">Normal content here</div>
          </body>
        </html>
        """
        assert detect_bot_wall(html) is False

    def test_provider_named_in_prose(self):
        html = """
        <html>
          <head><title>Hosting notes</title></head>
          <body><p>We moved our CDN to Cloudflare last year and pages load faster.</p></body>
        </html>
        """
        assert detect_bot_wall(html) is False

    def test_single_signal_is_not_enough(self):
        html = "<html><head><title>Just a moment</title></head><body>Loading chapter...</body></html>"
        assert detect_bot_wall(html) is False

    def test_empty_payload(self):
        assert detect_bot_wall("") is False
