import os
import sys
import abc
import time
import platform
import zipfile
import numpy
import psutil
import pandas
import cpuinfo # https://github.com/workhorsy/py-cpuinfo
os.environ.setdefault('GIT_PYTHON_REFRESH', 'quiet') # git executable is optional
import git     # https://github.com/gitpython-developers/GitPython

from matmul_bench import BenchmarkRunner, split_duration
from utils import logger, mean

class Program(metaclass=abc.ABCMeta):
    key = ['run_index']
    header = []

    def __init__(self):
        self.run_index = 0
        self.__rows__ = []

    def __str__(self):
        return self.__class__.__name__

    def fetch_data(self):
        self.__fetch_data__()
        self.run_index += 1

    @abc.abstractmethod
    def __fetch_data__(self):
        pass

    def __append_data__(self, data):
        data['run_index'] = self.run_index
        self.__rows__.append(data)

    @staticmethod
    def __merge_data__(df1, df2):
        if len(df2) == 0:
            return df1
        if len(df1) == 0:
            return df2
        if df2.index.nlevels > df1.index.nlevels:
            df1, df2 = df2, df1
        if df1.index.nlevels > df2.index.nlevels:
            # Per-run data (e.g. the date) is repeated on every row of the per-size data.
            index_1 = list(df1.index.names)
            index_2 = list(df2.index.names)
            if not set(index_1) > set(index_2):
                raise ValueError('Indexes do not match, got %s and %s.' % (index_1, index_2))
            return df1.reset_index().join(df2, on=index_2, how='left').set_index(index_1)
        try:
            return df1.join(df2, how='outer')
        except ValueError: # overlap of columns
            result = df1.combine_first(df2)
            if len(df1) + len(df2) != len(result):
                raise ValueError('The two dataframes have overlapping columns and share common values in their index.')
            dtypes = df1.dtypes.combine_first(df2.dtypes)
            for k, v in dtypes.items():
                try:
                    result[k] = result[k].astype(v)
                except ValueError:
                    pass # NaN for missing data turns int columns into float
            return result

    def merge_data(self, other_data):
        if len(self.data) == 0:
            return other_data
        try:
            df = self.data.set_index(self.key)
        except KeyError:
            raise ValueError('%s: Could not set index on key %s.' % (self.__class__.__name__, self.key))
        return self.__merge_data__(df, other_data)

    def post_process(self):
        pass

    @property
    def data(self):
        try:
            return self.__data__
        except AttributeError:
            if len(self.__rows__) == 0:
                return pandas.DataFrame()
            return pandas.DataFrame(self.__rows__)

class CommandLine(Program):
    header = ['git_hash', 'command_line']
    def __init__(self):
        super().__init__()
        try:
            self.hash = git.Repo(search_parent_directories=True).head.object.hexsha
        except (git.InvalidGitRepositoryError, git.NoSuchPathError, git.GitCommandNotFound, ValueError):
            self.hash = None # not a git checkout, or no commit yet
        self.cmd = ' '.join(sys.argv)

    def __fetch_data__(self):
        self.__append_data__({'git_hash': self.hash, 'command_line': self.cmd})

class Date(Program):
    header = ['date', 'hour']

    def __fetch_data__(self):
        date = time.strftime("%Y/%m/%d")
        hour = time.strftime("%H:%M:%S")
        self.__append_data__({'date': date, 'hour': hour})

class Platform(Program):
    header = ['hostname', 'os', 'numpy_version']
    def __init__(self):
        super().__init__()
        self.hostname = platform.node()
        self.os = platform.platform()

    def __fetch_data__(self):
        self.__append_data__({'hostname': self.hostname, 'os': self.os, 'numpy_version': numpy.__version__})

class CPU(Program):
    header = ['cpu_model',
              'nb_cores',
              'advertised_frequency',
            ]

    def __init__(self):
        super().__init__()
        self.cpuinfo = cpuinfo.get_cpu_info() # slow, the CPU does not change between runs

    def __fetch_data__(self):
        frequency = self.cpuinfo.get('hz_advertised')
        self.__append_data__({'cpu_model': self.cpuinfo.get('brand_raw'),
                            'nb_cores':  self.cpuinfo.get('count', psutil.cpu_count()),
                            'advertised_frequency': frequency[0] if frequency else None,
                            })

class Temperature(Program):
    header = ['average_temperature']

    @staticmethod
    def get_core_temperatures():
        try:
            sensors = psutil.sensors_temperatures()
        except AttributeError: # not provided on this platform
            return []
        return [temp.current for temp in sensors.get('coretemp', []) if temp.label.startswith('Core')]

    def __fetch_data__(self):
        temperatures = self.get_core_temperatures()
        if len(temperatures) > 0:
            temperature = mean(temperatures)
        else:
            temperature = float('NaN')
        self.__append_data__({'average_temperature': temperature})

class Matmul(Program):
    header = ['size', 'element_type', 'time', 'seconds', 'milliseconds', 'gflops']
    key = ['run_index', 'size']

    def __init__(self, config, runner=None):
        super().__init__()
        self.config = config
        self.runner = runner if runner is not None else BenchmarkRunner()
        self.results = []

    def __str__(self):
        return '%s(%s, %s)' % (self.__class__.__name__, self.config.element_type, list(self.config.exponents))

    def run(self):
        self.results = self.runner.run_configuration(self.config)

    def __fetch_data__(self):
        for result in self.results:
            secs, millis = split_duration(result.time)
            self.__append_data__({'size': result.size,
                                  'element_type': result.element_type,
                                  'time': result.time,
                                  'seconds': secs,
                                  'milliseconds': millis,
                                 })
        self.results = []

    def post_process(self):
        df = self.data
        if len(df) == 0:
            return
        flops = 2 * df['size'].astype(float)**3
        df['gflops'] = flops / df['time'].replace(0, numpy.nan) * 1e-9
        self.__data__ = df

class ExpEngine:
    def __init__(self, application, wrappers):
        self.wrappers = wrappers
        self.application = application
        self.programs = [*self.wrappers, self.application]

    @property
    def header(self):
        header = list(self.application.key)
        for prog in self.programs:
            header.extend(h for h in prog.header if h not in header)
        return header

    def order_columns(self, df):
        columns = [h for h in self.header if h in df.columns]
        columns.extend(c for c in df.columns if c not in columns)
        return df[columns]

    def run(self):
        self.application.run()

    def run_all(self, nb_runs, csv_filename=None, compress=False):
        logger.info('Running %s, %d run(s)' % (self.application, nb_runs))
        for run_index in range(nb_runs):
            logger.info('Run %d/%d' % (run_index+1, nb_runs))
            self.run()
            for prog in self.programs:
                prog.fetch_data()
        all_data = pandas.DataFrame()
        for prog in self.programs:
            prog.post_process()
            all_data = prog.merge_data(all_data)
        if len(all_data) > 0:
            all_data = self.order_columns(all_data.reset_index())
        if csv_filename is not None:
            all_data.to_csv(csv_filename, index=False)
            logger.info('Wrote the results: %s' % csv_filename)
            if compress:
                zip_name = os.path.splitext(csv_filename)[0] + '.zip'
                with zipfile.ZipFile(zip_name, 'w', zipfile.ZIP_DEFLATED) as myzip:
                    myzip.write(csv_filename)
                logger.info('Compressed the results: %s' % zip_name)
        return all_data
