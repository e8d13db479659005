"""Console UI for nunchi application."""

from core.config import XP_VALUES, NO_TRANSLATE_MILESTONE
from cli.api_client import NunchiAPIClient


class ConsoleUI:
    """Console user interface for nunchi application."""

    def __init__(self, client: NunchiAPIClient):
        self.client = client
        self.messages: list[dict] = []
        self.last_vocabulary: list[dict] = []

    def print_reply(self, result: dict):
        """Print the persona's reply and what the message earned."""
        print('-' * 40)
        print(result['reply'])
        print('-' * 40)
        print(f"Mood: {result['mood']} (Korean {round(result['korean_ratio'] * 100)}%) | {result['generate_ms']}ms")
        for event in result['xp_events']:
            print(f"  +{event['amount']} XP ({event['action']})")
        if result['vocabulary']:
            words = ', '.join(w['korean'] for w in result['vocabulary'])
            print(f"New words: {words}  (type \"keep\" to save them)")

    def print_status(self, status: dict):
        """Print detailed status."""
        rank = status['rank']
        print('\n' + '=' * 50)
        print('STATUS SUMMARY')
        print('=' * 50)
        print(f"\nRank: {rank['korean']} ({rank['english']})")
        print(f"  {rank['description']}")
        next_rank = status['next_rank']
        if next_rank:
            print(f"  Next: {next_rank['korean']} at {next_rank['minXP']} XP and {next_rank['minVocab']} words "
                  f"({round(status['rank_progress'] * 100)}%)")
        else:
            print('  Top rank reached')
        print(f"\nTotal XP: {status['total_xp']}")
        print(f"Streak: {status['current_streak']} day(s), longest {status['longest_streak']}")
        stats = status['stats']
        print(f"Messages: {stats['total_messages']} | Flashcard sessions: {stats['total_flashcard_sessions']} "
              f"| Translations: {stats['total_translations']}")
        print(f"\nSaved words: {status['vocab_count']} ({status['unseen_words']} new)")
        print(f"Saved lessons: {status['lesson_count']}")
        print('\n' + '=' * 50 + '\n')

    def print_words(self, vocabulary: dict):
        if not vocabulary['words']:
            print('No saved words yet.')
            return
        for word in vocabulary['words']:
            print(f"  {word['korean']} ({word['romanization']}) {word['english']}")
        print(f"{vocabulary['count']} word(s)")

    def keep_words(self):
        if not self.last_vocabulary:
            print('No new words in the last reply.')
            return
        result = self.client.save_words(self.last_vocabulary)
        print(f"Saved {len(result['added'])} word(s), {result['count']} total")
        self.last_vocabulary = []

    def save_lesson(self):
        transcript = [{'role': m['role'], 'text': m['content']} for m in self.messages]
        result = self.client.save_lesson(transcript)
        if result['saved']:
            print(f"Lesson saved: {result['lesson']['preview']}")
        else:
            print('Nothing to save yet.')

    def run(self):
        """Run the main application loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            print(f"Connected to nunchi server ({health['service']})")
        except Exception:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        status = self.client.get_status()
        print(f"Restored: {status['rank']['korean']}, {status['total_xp']} XP, "
              f"{status['current_streak']} day streak")

        print('\nWelcome to Eden Goshiwon. Speak Korean to your neighbor.')
        print(f"Mostly-Korean messages earn {XP_VALUES['message_full_korean']} XP, "
              f"{NO_TRANSLATE_MILESTONE} in a row without translating earn a bonus")
        print('Commands: "status", "words", "keep", "translate", "save", "exit"\n')

        while True:
            user_input = input('==> ').strip()
            command = user_input.lower()

            if command == 'exit':
                print('안녕히 가세요!')
                return

            elif command == '':
                continue

            elif command == 'status':
                try:
                    self.print_status(self.client.get_status())
                except Exception as e:
                    print(f"Error getting status: {e}")

            elif command == 'words':
                try:
                    self.print_words(self.client.list_vocabulary(mark_seen=True))
                except Exception as e:
                    print(f"Error getting words: {e}")

            elif command == 'keep':
                try:
                    self.keep_words()
                except Exception as e:
                    print(f"Error saving words: {e}")

            elif command == 'translate':
                try:
                    self.client.record_translation()
                    print('Translation used; the no-translate streak starts over.')
                except Exception as e:
                    print(f"Error recording translation: {e}")

            elif command == 'save':
                try:
                    self.save_lesson()
                except Exception as e:
                    print(f"Error saving lesson: {e}")

            else:
                self.messages.append({'role': 'user', 'content': user_input})
                try:
                    result = self.client.chat(self.messages)
                except Exception as e:
                    self.messages.pop()
                    print(f"Error sending message: {e}")
                    continue
                self.messages.append({'role': 'assistant', 'content': result['reply']})
                self.last_vocabulary = result['vocabulary']
                self.print_reply(result)
