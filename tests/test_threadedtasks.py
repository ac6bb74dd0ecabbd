import threading

from appsync.auth.controller import AuthController
from appsync.auth.provider import MemoryIdentityProvider
from appsync.gui.viewmodel.threadedtasks import AuthTask, Dispatcher


class TestAuthTask:

    def test_runs_off_calling_thread(self, qt_app):
        threads = []

        def request():
            threads.append(threading.get_ident())
            return True, 'done'

        task = AuthTask(request)
        task.start()
        assert task.wait(5000)
        assert len(threads) == 1
        assert threads[0] != threading.get_ident()
        assert (task.success, task.data) == (True, 'done')

    def test_validation_error_is_a_failed_result(self, qt_app):
        provider = MemoryIdentityProvider()
        auth = AuthController(provider)
        results = []
        task = AuthTask(lambda: auth.sign_up('user', 'user@example.com', 'short'))
        task.result_signal.connect(lambda success, data: results.append((success, data)))
        task.start()
        assert task.wait(5000)
        qt_app.processEvents()
        assert task.success is False
        assert task.data == auth.last_error
        assert results == [(False, auth.last_error)]
        assert provider.calls == []


class TestDispatcher:

    def test_runs_on_qt_thread(self, qt_app):
        dispatcher = Dispatcher()
        seen = []
        worker = threading.Thread(target=lambda: dispatcher(lambda: seen.append(threading.get_ident())))
        worker.start()
        worker.join()
        qt_app.processEvents()
        assert seen == [threading.get_ident()]
